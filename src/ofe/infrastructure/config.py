"""Process configuration.

Values come from ``OFE_*`` environment variables or a ``.env`` file in the
working directory.  Per-platform business parameters (lead times, margin)
are data and live in the platforms table, not here.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# When installed in editable mode the project root is the repo root.
_PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="OFE_", env_file=".env", extra="ignore")

    data_dir: Path = _PROJECT_ROOT / "data"
    log_level: str = "INFO"
    default_timezone: str = "Asia/Dubai"
    default_currency: str = "AED"
    system_user_email_prefix: str = "system"

    @property
    def store_path(self) -> Path:
        return self.data_dir / "store.json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
