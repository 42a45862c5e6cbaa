# evaluation/periods.py
from datetime import date
from typing import Iterable

from pydantic import BaseModel

from src.evaluation.errors import NoActivePeriod


class EvaluationPeriod(BaseModel):
    id: str
    name: str
    academic_year: str
    period_number: int = 1
    starts_at: date
    ends_at: date

    class Config:
        from_attributes = True

    def is_open(self, today: date) -> bool:
        return self.starts_at <= today <= self.ends_at


def active_period(periods: Iterable[EvaluationPeriod], today: date) -> EvaluationPeriod:
    """Return the period whose inclusive date window contains `today`.

    Raises:
        NoActivePeriod: No period is open on `today`.
    """
    for period in periods:
        if period.is_open(today):
            return period
    raise NoActivePeriod()


def days_remaining(period: EvaluationPeriod, today: date) -> int:
    """Days left to submit, counting today as one when the period is open."""
    return max(0, (period.ends_at - today).days + 1)
