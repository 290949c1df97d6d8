# src/medsync/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The stores and the refresh loop depend on Protocols instead of concrete
implementations, so tests can swap in in-memory fakes.
"""

from datetime import date
from typing import Any, Protocol


class KeyValueStore(Protocol):
    """String-to-string persistence (the planner's only durable medium)."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...
    def keys(self) -> list[str]: ...


class TaskRepo(Protocol):
    def add_task(
            self,
            *,
            title: str,
            start: str = "",
            end: str = "",
            description: str = "",
            completed: bool = False,
            task_date: date | None = None,
    ) -> int: ...

    def list_tasks(self) -> list[Any]: ...
    def get_task(self, task_id: int) -> Any | None: ...
    def set_completed(self, task_id: int, completed: bool) -> bool: ...
    def toggle_completed(self, task_id: int) -> bool | None: ...
    def delete_task(self, task_id: int) -> bool: ...
    def count_tasks(self) -> int: ...


class NoteRepo(Protocol):
    def add_note(self, content: str) -> int: ...
    def update_note(self, note_id: int, content: str) -> bool: ...
    def delete_note(self, note_id: int) -> bool: ...
    def get_note(self, note_id: int) -> Any | None: ...
    def list_notes(self) -> list[Any]: ...
    def count_notes(self) -> int: ...
