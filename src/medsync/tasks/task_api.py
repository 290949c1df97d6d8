# src/medsync/tasks/task_api.py

"""
Application-level helpers used by the console front-end.

Each helper guards against an unavailable store: when the planner database
failed to open, mutations become logged no-ops and reads return nothing.
"""

from __future__ import annotations

import logging

from ..core.state import AppState
from ..notes.note_models import Note
from .expiry import partition_tasks
from .task_models import TaskPartition

logger = logging.getLogger(__name__)

_FALLBACK_END_TIME = "23:59"


def _current_hhmm(state: AppState) -> str:
    return state.now().strftime("%H:%M")


def add_task_from_inputs(
    state: AppState,
    title: str,
    *,
    start: str | None = None,
    end: str | None = None,
    description: str = "",
) -> int | None:
    """
    Create a task from raw form inputs.

    Blank title -> nothing is written (returns None).
    Defaults: start = current HH:MM, end = settings.default_end_time,
    date = today.
    """
    if state.tasks is None:
        logger.warning("Store unavailable; add_task ignored.")
        return None

    clean = (title or "").strip()
    if not clean:
        return None

    now = state.now()
    default_end = str(getattr(state.settings, "default_end_time", _FALLBACK_END_TIME) or _FALLBACK_END_TIME)

    task_id = state.tasks.add_task(
        title=clean,
        start=(start or "").strip() or _current_hhmm(state),
        end=(end or "").strip() or default_end,
        description=(description or "").strip(),
        task_date=now.date(),
    )
    logger.info("Task created id=%s title=%r", task_id, clean)
    return task_id


def load_task_board(state: AppState) -> TaskPartition:
    """Re-query every task and split it into active / history for the current time."""
    if state.tasks is None:
        return TaskPartition()
    return partition_tasks(state.tasks.list_tasks(), state.now())


def toggle_task(state: AppState, task_id: int) -> bool | None:
    if state.tasks is None:
        logger.warning("Store unavailable; toggle_task ignored.")
        return None
    return state.tasks.toggle_completed(task_id)


def remove_task(state: AppState, task_id: int) -> bool:
    if state.tasks is None:
        logger.warning("Store unavailable; remove_task ignored.")
        return False
    return state.tasks.delete_task(task_id)


def add_note(state: AppState, content: str) -> int | None:
    if state.notes is None:
        logger.warning("Store unavailable; add_note ignored.")
        return None
    text = (content or "").strip()
    if not text:
        return None
    note_id = state.notes.add_note(text)
    logger.info("Note saved id=%s", note_id)
    return note_id


def edit_note(state: AppState, note_id: int, content: str) -> bool:
    if state.notes is None:
        logger.warning("Store unavailable; edit_note ignored.")
        return False
    return state.notes.update_note(note_id, content)


def remove_note(state: AppState, note_id: int) -> bool:
    if state.notes is None:
        logger.warning("Store unavailable; remove_note ignored.")
        return False
    return state.notes.delete_note(note_id)


def load_notes(state: AppState) -> list[Note]:
    if state.notes is None:
        return []
    return state.notes.list_notes()
