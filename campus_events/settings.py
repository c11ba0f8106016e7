"""Runtime configuration, read from ``CAMPUS_EVENTS_*`` environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CAMPUS_EVENTS_", env_file=".env", extra="ignore")

    log_level: str = "INFO"
    # Load the campus fixture clubs, users and events at startup.
    seed_fixtures: bool = True
    # When False, clashing submissions are stored and only warned about.
    block_conflicting_submissions: bool = True
    mock_password: str = "password"


@lru_cache
def get_settings() -> Settings:
    return Settings()
