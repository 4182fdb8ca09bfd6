"""Configuration for the slot scheduler."""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings


class SchedulerSettings(BaseSettings):
    """Settings for slot scheduling.

    Values come from ``ADSLOTS_*`` environment variables or a local
    ``.env`` file, falling back to the defaults below.
    """

    # Playback seconds a group's loop can carry in any 7-day window
    weekly_capacity_seconds: float = 60.0

    # Days ahead the feasibility search scans before giving up
    horizon_days: int = 365

    # JSON file repositories
    data_dir: Path = Path("data")

    # Queue campaigns that cannot be placed instead of rejecting them
    queue_when_full: bool = True

    model_config = {
        "env_prefix": "ADSLOTS_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("weekly_capacity_seconds")
    @classmethod
    def capacity_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("weekly_capacity_seconds must be > 0")
        return value

    @field_validator("horizon_days")
    @classmethod
    def horizon_not_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("horizon_days must be >= 0")
        return value


@lru_cache
def get_settings() -> SchedulerSettings:
    """Get cached scheduler settings instance."""
    return SchedulerSettings()
