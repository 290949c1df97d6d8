# src/medsync/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Every path lives under a gitignored local data directory by default.
- Storage keys are configurable so several planners can share one storage file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "MEDSYNC"

DEFAULT_DB_IMAGE_KEY = "medsync_db"
DEFAULT_GOALS_KEY = "medsync_goals"
DEFAULT_END_TIME = "23:59"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    storage_path: Path

    # ---- Storage keys ----
    db_image_key: str
    goals_key: str

    # ---- Tasks ----
    expiry_refresh_seconds: float
    refresh_enabled: bool
    default_end_time: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "medsync").strip() or "medsync"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/medsync"))
        storage_path = _env_path(_k("STORAGE_PATH"), data_dir / "storage.json")

        db_image_key = _env(_k("DB_IMAGE_KEY"), DEFAULT_DB_IMAGE_KEY).strip() or DEFAULT_DB_IMAGE_KEY
        goals_key = _env(_k("GOALS_KEY"), DEFAULT_GOALS_KEY).strip() or DEFAULT_GOALS_KEY

        expiry_refresh_seconds = _env_float(_k("EXPIRY_REFRESH_SECONDS"), 30.0)
        refresh_enabled = _env_bool(_k("REFRESH_ENABLED"), True)
        default_end_time = _env(_k("DEFAULT_END_TIME"), DEFAULT_END_TIME).strip() or DEFAULT_END_TIME

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_path=storage_path,
            db_image_key=db_image_key,
            goals_key=goals_key,
            expiry_refresh_seconds=expiry_refresh_seconds,
            refresh_enabled=refresh_enabled,
            default_end_time=default_end_time,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
