# app/core/dependencies.py
from datetime import date


def get_today() -> date:
    return date.today()
