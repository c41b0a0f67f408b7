"""
Runtime configuration for the complaint portal client.
Values come from environment variables prefixed with PORTAL_ (or a local
.env file) and are validated by pydantic-settings.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MB = 1024 * 1024


class Settings(BaseSettings):
    """Client settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    API_BASE_URL: str = "http://localhost:5000"
    REQUEST_TIMEOUT: float = Field(default=30.0, gt=0)

    # Timing (seconds)
    SEARCH_DEBOUNCE_SECONDS: float = 0.5
    UNREAD_POLL_SECONDS: float = 60.0
    LOGOUT_DELAY_SECONDS: float = 3.0
    TOAST_SECONDS: float = 5.0
    TRACKING_TOAST_SECONDS: float = 10.0

    # Lists
    DEFAULT_PAGE_SIZE: int = Field(default=10, ge=1)

    # Uploads
    MAX_IMAGE_BYTES: int = 5 * MB
    MAX_ATTACHMENT_BYTES: int = 10 * MB

    # Local session storage (token + cached user data)
    SESSION_FILE: Path = Path.home() / ".complaint-portal" / "session.json"

    LOG_LEVEL: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
