# tests/test_task_store.py

from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from medsync.notes.note_store import NoteStore
from medsync.storage.database import PlannerDatabase
from medsync.tasks.task_store import TaskStore


def test_task_add_list_delete(db: PlannerDatabase) -> None:
    store = TaskStore(db)

    late = store.add_task(title="Discharge summary", start="14:00", end="15:00", task_date=date(2026, 3, 10))
    early = store.add_task(title="  Handover  ", start="07:30", end="08:00", description="night team")
    assert late > 0 and early > late

    tasks = store.list_tasks()
    assert [t.title for t in tasks] == ["Handover", "Discharge summary"]
    assert tasks[0].description == "night team"
    assert tasks[0].task_date is None
    assert tasks[1].task_date == date(2026, 3, 10)
    assert tasks[1].completed is False
    assert tasks[1].created_at

    assert store.delete_task(early) is True
    assert store.delete_task(early) is False
    assert store.count_tasks() == 1


def test_task_title_is_required(db: PlannerDatabase) -> None:
    store = TaskStore(db)
    with pytest.raises(ValueError):
        store.add_task(title="   ")
    assert store.count_tasks() == 0


def test_toggle_twice_restores_stored_row(db: PlannerDatabase) -> None:
    store = TaskStore(db)
    task_id = store.add_task(title="Rounds", start="09:00", end="10:00", description="ward 4", task_date=date(2026, 3, 10))
    original = store.get_task(task_id)
    assert original is not None

    assert store.toggle_completed(task_id) is True
    toggled = store.get_task(task_id)
    assert toggled == replace(original, completed=True)

    assert store.toggle_completed(task_id) is False
    assert store.get_task(task_id) == original


def test_toggle_missing_task(db: PlannerDatabase) -> None:
    store = TaskStore(db)
    assert store.toggle_completed(999) is None
    assert store.set_completed(999, True) is False


def test_note_add_update_delete(db: PlannerDatabase) -> None:
    store = NoteStore(db)

    first = store.add_note("  Order gloves  ")
    second = store.add_note("Renew license")
    assert store.get_note(first).content == "Order gloves"

    notes = store.list_notes()
    assert [n.id for n in notes] == [second, first]

    assert store.update_note(first, "Order gloves (size M)") is True
    assert store.get_note(first).content == "Order gloves (size M)"
    assert store.update_note(12345, "nope") is False

    assert store.delete_note(second) is True
    assert [n.id for n in store.list_notes()] == [first]
    assert store.count_notes() == 1


def test_edited_note_moves_to_the_top(db: PlannerDatabase) -> None:
    store = NoteStore(db)
    a = store.add_note("A")
    b = store.add_note("B")
    assert [n.id for n in store.list_notes()] == [b, a]

    store.update_note(a, "A, revised")

    assert [n.id for n in store.list_notes()] == [a, b]


def test_note_content_is_required(db: PlannerDatabase) -> None:
    store = NoteStore(db)
    with pytest.raises(ValueError):
        store.add_note("   ")
