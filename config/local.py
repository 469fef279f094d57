from __future__ import annotations

from pathlib import Path
from pydantic_settings import SettingsConfigDict

from config.base import BaseAppSettings

ROOT = Path(__file__).resolve().parents[1]
ENV_FILE = ROOT / "env" / ".env.local"


class LocalSettings(BaseAppSettings):
    DATABASE_URL: str | None = "sqlite+aiosqlite:///./itad_local.db"
    APP_ENV: str = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
    )
