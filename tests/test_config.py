# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from medsync.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "MEDSYNC_DATA_DIR",
        "MEDSYNC_STORAGE_PATH",
        "MEDSYNC_DB_IMAGE_KEY",
        "MEDSYNC_GOALS_KEY",
        "MEDSYNC_EXPIRY_REFRESH_SECONDS",
        "MEDSYNC_REFRESH_ENABLED",
        "MEDSYNC_DEFAULT_END_TIME",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()

    assert s.data_dir == Path(".local/medsync")
    assert s.storage_path == Path(".local/medsync/storage.json")
    assert s.db_image_key == "medsync_db"
    assert s.goals_key == "medsync_goals"
    assert s.expiry_refresh_seconds == 30.0
    assert s.refresh_enabled is True
    assert s.default_end_time == "23:59"


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MEDSYNC_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("MEDSYNC_STORAGE_PATH", raising=False)
    monkeypatch.setenv("MEDSYNC_EXPIRY_REFRESH_SECONDS", "5")
    monkeypatch.setenv("MEDSYNC_REFRESH_ENABLED", "off")
    monkeypatch.setenv("MEDSYNC_GOALS_KEY", "  ")

    s = Settings.from_env()

    assert s.storage_path == tmp_path / "storage.json"
    assert s.expiry_refresh_seconds == 5.0
    assert s.refresh_enabled is False
    assert s.goals_key == "medsync_goals"


@pytest.mark.parametrize("raw", ["abc", "-3", "0"])
def test_bad_refresh_interval_falls_back(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("MEDSYNC_EXPIRY_REFRESH_SECONDS", raw)
    assert Settings.from_env().expiry_refresh_seconds == 30.0
