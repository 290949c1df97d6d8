# src/medsync/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- opens the key-value store and restores the planner database from it,
- wires the concrete stores into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import KeyValueStore
from ..core.state import AppState
from ..goals.goal_store import GoalStore
from ..notes.note_store import NoteStore
from ..storage.database import PlannerDatabase, StoreError
from ..storage.kv_store import JsonFileKeyValueStore
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def open_database(kv: KeyValueStore, image_key: str) -> PlannerDatabase | None:
    """
    Restore the planner database, or return None if the store is unavailable.

    A corrupted image is left untouched in the key-value store.
    """
    try:
        return PlannerDatabase(kv, image_key=image_key)
    except StoreError:
        logger.exception("Database init failed; tasks and notes are unavailable.")
        return None


def create_initial_state(*, settings=None, kv: KeyValueStore | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the key-value store) injectable makes the app easier
    to test. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if kv is None:
        _ensure_local_dirs(settings)
        kv = JsonFileKeyValueStore(settings.storage_path)

    database = open_database(kv, settings.db_image_key)

    return AppState(
        settings=settings,
        kv=kv,
        goals=GoalStore(kv, key=settings.goals_key),
        database=database,
        tasks=TaskStore(database) if database is not None else None,
        notes=NoteStore(database) if database is not None else None,
    )


def shutdown_state(state: AppState) -> None:
    """Close the in-memory database. The image is already persisted after each write."""
    if state.database is not None:
        state.database.close()
