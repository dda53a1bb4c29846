# gymbook/config.py

from functools import lru_cache

import pytz
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GYM_",
        env_file=".env",
        extra="ignore",
    )

    database_url: str = "sqlite:///./gym.db"

    secret_key: str = "change-me-later"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    cookie_name: str = "gym_session"

    # Facility wall clock. Hours, alignment and calendar days are read here.
    timezone: str = "UTC"
    open_hour: int = 6
    close_hour: int = 22
    slot_minutes: int = 30
    max_duration_minutes: int = 90

    neighbor_horizon_days: int = 7
    trainer_horizon_days: int = 28
    validate_max_days: int = 365

    log_level: str = "INFO"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @property
    def tz(self):
        return pytz.timezone(self.timezone)


@lru_cache
def get_settings() -> Settings:
    return Settings()
