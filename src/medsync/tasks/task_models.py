# src/medsync/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True, slots=True)
class Task:
    id: int
    title: str
    start: str
    end: str
    description: str
    completed: bool

    # Creation day. None for rows written before the column existed.
    task_date: date | None
    created_at: str


@dataclass(slots=True)
class TaskPartition:
    """
    One run of the expiry classifier over the full task list.

    active and history are disjoint and together hold every task.
    """

    active: list[Task] = field(default_factory=list)
    history: list[Task] = field(default_factory=list)

    @property
    def active_label(self) -> str:
        return f"{len(self.active)} Active"

    @property
    def history_label(self) -> str:
        return f"{len(self.history)} Records"

    def history_ids(self) -> set[int]:
        return {t.id for t in self.history}
