# salonbook/core/config.py
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz


def is_running_tests() -> bool:
    """Detect if code is running under pytest."""
    return os.getenv("PYTEST_CURRENT_TEST") is not None


_PROJECT_ROOT = Path(__file__).resolve().parents[2]

logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = _PROJECT_ROOT / ".env"
    logger.debug("[CONFIG] Looking for .env at: %s (exists=%s)", env_path, env_path.exists())
    load_dotenv(env_path)


class Settings(BaseSettings):
    api_title: str = Field(default="Salon Booking API", description="OpenAPI title")
    environment: str = Field(default="development", description="Deployment environment")
    log_level: str = Field(default="INFO", description="Root log level")
    is_testing: bool = False

    database_url: str = Field(
        default=f"sqlite:///{_PROJECT_ROOT / 'salonbook.db'}",
        description="SQLAlchemy database URL",
    )
    db_pool_size: int = Field(default=10, ge=1)
    db_max_overflow: int = Field(default=5, ge=0)
    sqlite_busy_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="How long a SQLite writer waits for the database lock",
    )

    default_timezone: str = Field(
        default="America/New_York",
        description="IANA zone used when a business has none configured",
    )
    default_slot_interval_minutes: int = Field(
        default=30, description="Slot granularity when an availability window sets none"
    )
    default_slot_range_days: int = Field(default=7, description="Days listed when none requested")
    max_slot_range_days: int = Field(default=30, description="Upper bound for slot listing ranges")
    hold_bookings_for_payment: bool = Field(
        default=False,
        description="Create bookings as PENDING until the payment collaborator confirms them",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("default_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator(
        "default_slot_interval_minutes", "default_slot_range_days", "max_slot_range_days"
    )
    @classmethod
    def _require_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def get_database_url(self, override: Optional[str] = None) -> str:
        """Get the database URL, honouring an explicit override."""
        return override or self.database_url


settings = Settings()
