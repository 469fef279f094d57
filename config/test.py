from __future__ import annotations

import os
import tempfile
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from config.base import BaseAppSettings

TEST_DB_PATH = Path(os.environ.get("TEST_DB_PATH", Path(tempfile.gettempdir()) / "itad_test.db"))


class TestSettings(BaseAppSettings):
    DATABASE_URL: str | None = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
    APP_ENV: str = "test"
    SECRET_KEY: str | None = "test-secret-key"
    DEBUG: bool = False
    LOG_LEVEL: str = "WARNING"
    DEFAULT_CHARITY_PERCENT: float = 10.0

    model_config = SettingsConfigDict(env_file=None)
