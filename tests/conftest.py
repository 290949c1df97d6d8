# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from medsync.cli.bootstrap import create_initial_state
from medsync.core.state import AppState
from medsync.storage.database import PlannerDatabase
from medsync.storage.kv_store import MemoryKeyValueStore


class FixedClock:
    """Settable clock for AppState.clock."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the command handlers.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the developer's environment and .env.
    """
    return SimpleNamespace(
        app_name="medsync-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        storage_path=tmp_path / "storage.json",
        db_image_key="medsync_db",
        goals_key="medsync_goals",
        expiry_refresh_seconds=30.0,
        refresh_enabled=False,
        default_end_time="23:59",
    )


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def db(kv: MemoryKeyValueStore) -> PlannerDatabase:
    return PlannerDatabase(kv, image_key="medsync_db")


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc))


@pytest.fixture()
def state(settings: SimpleNamespace, kv: MemoryKeyValueStore, clock: FixedClock) -> AppState:
    """
    AppState wired with an in-memory key-value store and a fixed clock.

    The planner database itself is real SQLite, because its persistence
    lifecycle is part of what we want to test.
    """
    st = create_initial_state(settings=settings, kv=kv)
    st.clock = clock
    return st
