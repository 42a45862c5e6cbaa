"""Application configuration and LLM client initialization.

Defines `Settings` with environment variables and creates an `OPENAI_CLIENT`.
"""
# app/core/config.py
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from openai import AsyncOpenAI


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    OPENAI_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENAI_API_KEY: str = 'your_api_key'
    MODEL_NAME: str = 'openai/gpt-4o'

    APP_NAME: str = "Peer Evaluations"
    DEBUG: bool = True
    LOG_PATH: str = "logging"
    DATABASE_URL: str = "sqlite:///./app.db"
    JINJA2_TEMPLATES: str = str(Path(__file__).resolve().parents[1] / "templates")

    GENERAL_CATEGORY_LABEL: str = "General"
    ANONYMOUS_LABEL: str = "Anónimo"
    REPORT_DECIMALS: int = 2
    NON_SCORING_OPTION_LABELS: list[str] = [
        "no uso la plataforma",
        "no he presentado solicitudes de reembolso",
    ]


settings = Settings()
OPENAI_CLIENT = AsyncOpenAI(base_url=settings.OPENAI_BASE_URL, api_key=settings.OPENAI_API_KEY)
