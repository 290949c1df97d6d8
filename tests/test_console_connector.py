# tests/test_console_connector.py

from __future__ import annotations

from datetime import date

import pytest

from medsync.connectors.console_connector import make_refresh_printer, run_console_loop
from medsync.core.state import AppState
from medsync.tasks.task_models import Task, TaskPartition


def _task(task_id: int, title: str) -> Task:
    return Task(
        id=task_id,
        title=title,
        start="08:00",
        end="09:00",
        description="",
        completed=False,
        task_date=date(2026, 3, 10),
        created_at="",
    )


def test_refresh_printer_announces_moves(capsys: pytest.CaptureFixture[str]) -> None:
    on_refresh = make_refresh_printer()
    a, b = _task(1, "Rounds"), _task(2, "Labs")

    on_refresh(TaskPartition(active=[a, b]))
    assert capsys.readouterr().out == ""

    on_refresh(TaskPartition(active=[b], history=[a]))
    out = capsys.readouterr().out
    assert "#1 'Rounds' ended at 09:00; moved to history." in out
    assert "1 Active / 1 Records" in out


def test_console_loop_runs_commands_and_quick_add(
    state: AppState,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    lines = iter(["", "Don't forget gloves", "/tasks", "/exit", "/never-reached"])
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(lines))

    run_console_loop(state)

    out = capsys.readouterr().out
    assert "Task added" in out
    assert "Don't forget gloves" in out
    assert "1 Active" in out
    assert [t.title for t in state.tasks.list_tasks()] == ["Don't forget gloves"]


def test_console_loop_exits_on_eof(state: AppState, monkeypatch: pytest.MonkeyPatch) -> None:
    def _eof(_prompt: str = "") -> str:
        raise EOFError

    monkeypatch.setattr("builtins.input", _eof)
    run_console_loop(state)
