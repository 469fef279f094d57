from __future__ import annotations

from pathlib import Path
from pydantic import model_validator
from pydantic_settings import SettingsConfigDict

from config.base import BaseAppSettings
from sqlalchemy.engine import URL

ROOT = Path(__file__).resolve().parents[1]
ENV_FILE = ROOT / "env" / ".env.staging"


class StageSettings(BaseAppSettings):
    APP_ENV: str = "stage"
    DEBUG: bool = False

    # Database components
    DB_DRIVER: str = "postgresql+asyncpg"
    DB_HOST: str | None = None
    DB_PORT: int = 5432
    DB_USER: str | None = None
    DB_PASSWORD: str | None = None
    DB_NAME: str | None = None

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
    )

    @model_validator(mode="after")
    def _build_database_url(self) -> "StageSettings":
        """Construct database URL from components unless given explicitly"""
        if not self.DATABASE_URL and self.DB_HOST:
            url = URL.create(
                drivername=self.DB_DRIVER,
                username=self.DB_USER,
                password=self.DB_PASSWORD,
                host=self.DB_HOST,
                port=self.DB_PORT,
                database=self.DB_NAME,
            )
            self.DATABASE_URL = url.render_as_string(hide_password=False)
        return self
