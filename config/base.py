from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class BaseAppSettings(BaseSettings):
    """Settings shared by every environment."""

    DATABASE_URL: str | None = None
    APP_ENV: str = "local"
    SECRET_KEY: str | None = None
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Comma-separated or JSON list; parsed in main.get_cors_origins
    CORS_ORIGINS: str = ""

    # Valuation configuration
    DEFAULT_CHARITY_PERCENT: float = Field(default=0.0, ge=0, le=100)
    GRADE_MULTIPLIERS: dict[str, float] = Field(
        default_factory=lambda: {"A": 1.0, "B": 0.7, "C": 0.4, "D": 0.15, "Recycled": 0.0}
    )
    CERTIFICATE_BASE_URL: str = "/api/v1"
