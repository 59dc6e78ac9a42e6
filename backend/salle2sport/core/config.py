# backend/salle2sport/core/config.py
"""
Application settings for the Salle2Sport booking core.

Values are read from the environment (and a local ``.env`` file when present).
Business thresholds live here so the rule functions never hard-code them twice.
"""

import logging
import os

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

load_dotenv()

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Runtime configuration."""

    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Persistence
    database_url: str = Field(default="sqlite:///./salle2sport.db")
    db_echo: bool = Field(default=False)

    # Celery broker / result backend
    redis_url: str = Field(default="redis://localhost:6379/0")

    # Local timezone of the gym, used for "today" rollups only
    gym_timezone: str = Field(default="Europe/Paris")

    # Booking rules
    cancellation_notice_hours: float = Field(
        default=2.0, description="Minimum notice for a penalty-free cancellation"
    )
    default_class_duration_minutes: int = Field(default=60)

    # Billing rules
    loyalty_min_months: int = Field(default=6)
    loyalty_discount_percent: int = Field(default=10)
    no_show_penalty_threshold: int = Field(
        default=5, description="Penalty applies strictly above this many monthly no-shows"
    )
    no_show_penalty_rate: float = Field(default=0.15)

    # Scheduled sweep
    no_show_sweep_minutes: int = Field(default=15)

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "cancellation_notice_hours",
        "default_class_duration_minutes",
        "loyalty_min_months",
        "no_show_sweep_minutes",
    )
    @classmethod
    def _require_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @field_validator("loyalty_discount_percent")
    @classmethod
    def _validate_percent(cls, value: int) -> int:
        if not 0 <= value <= 100:
            raise ValueError("must be between 0 and 100")
        return value

    @field_validator("no_show_penalty_threshold")
    @classmethod
    def _validate_threshold(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("no_show_penalty_rate")
    @classmethod
    def _validate_rate(cls, value: float) -> float:
        if not 0 <= value <= 1:
            raise ValueError("must be between 0 and 1")
        return value

    @field_validator("gym_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"unknown timezone: {value}") from exc
        return value

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


settings = Settings()
logger.debug("[CONFIG] environment=%s database=%s", settings.environment, settings.database_url)
