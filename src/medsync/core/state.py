# src/medsync/core/state.py

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from ..goals.goal_store import GoalStore
from ..storage.database import PlannerDatabase
from .ports import KeyValueStore, NoteRepo, TaskRepo


def local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules.
    settings: object

    kv: KeyValueStore
    goals: GoalStore

    # None when the planner database could not be opened (store unavailable).
    database: PlannerDatabase | None = None
    tasks: TaskRepo | None = None
    notes: NoteRepo | None = None

    clock: Callable[[], datetime] = local_now
    lock: threading.RLock = field(default_factory=threading.RLock)

    @property
    def store_available(self) -> bool:
        return self.database is not None

    def now(self) -> datetime:
        return self.clock()
