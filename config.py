"""
Configuration for the Therapy Queue service.

All values can be overridden with THERAPY_QUEUE_* environment variables.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    allowed_origins: list[str] = ["*"]
    log_level: str = "INFO"

    # Scheduling
    default_duration_minutes: int = 60
    max_advance_days: int = 365
    slot_step_minutes: int = 30
    reschedule_horizon_minutes: int = 24 * 60
    conflict_policy: Literal["queue", "reject"] = "queue"

    # HTTP client
    api_base_url: str = "http://localhost:8000/api"
    api_token: Optional[str] = None
    request_timeout_seconds: float = 30.0

    model_config = {"env_prefix": "THERAPY_QUEUE_"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
