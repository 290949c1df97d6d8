# tests/test_task_scheduler.py

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from medsync.tasks.task_models import Task, TaskPartition
from medsync.tasks.task_scheduler import HistoryWatch, run_expiry_refresh, start_refresh_in_background


def _task(task_id: int) -> Task:
    return Task(
        id=task_id,
        title=f"t{task_id}",
        start="08:00",
        end="09:00",
        description="",
        completed=False,
        task_date=date(2026, 3, 10),
        created_at="",
    )


def test_history_watch_reports_only_new_moves() -> None:
    watch = HistoryWatch()
    t1, t2, t3 = _task(1), _task(2), _task(3)

    assert watch.update(TaskPartition(active=[t2, t3], history=[t1])) == []
    assert watch.update(TaskPartition(active=[t3], history=[t1, t2])) == [t2]
    assert watch.update(TaskPartition(active=[t3], history=[t1, t2])) == []
    # Deleted tasks simply disappear.
    assert watch.update(TaskPartition(active=[], history=[t3])) == [t3]


def test_history_watch_ignores_tasks_that_were_never_active() -> None:
    watch = HistoryWatch()
    t1, t2, late = _task(1), _task(2), _task(7)

    watch.update(TaskPartition(active=[t1], history=[]))
    # Added after its end time: straight into history.
    assert watch.update(TaskPartition(active=[t1], history=[late])) == []
    assert watch.update(TaskPartition(active=[t2], history=[late, t1])) == [t1]
    assert watch.update(TaskPartition(active=[], history=[late, t1, t2])) == [t2]


@pytest.mark.asyncio
async def test_refresh_loop_ticks_until_stopped() -> None:
    boards: list[TaskPartition] = []
    stop = asyncio.Event()
    calls = {"n": 0}

    def load_board() -> TaskPartition:
        calls["n"] += 1
        if calls["n"] == 2:
            raise RuntimeError("flaky read")
        return TaskPartition(active=[_task(calls["n"])])

    def on_refresh(board: TaskPartition) -> None:
        boards.append(board)
        if len(boards) >= 3:
            stop.set()

    await asyncio.wait_for(
        run_expiry_refresh(load_board, on_refresh, interval_seconds=0.01, stop_event=stop),
        timeout=2.0,
    )

    assert calls["n"] == 4
    assert [b.active[0].id for b in boards] == [1, 3, 4]


@pytest.mark.asyncio
async def test_refresh_loop_can_be_cancelled() -> None:
    ticks: list[int] = []

    runner = asyncio.create_task(
        run_expiry_refresh(
            lambda: TaskPartition(),
            lambda board: ticks.append(len(board.active)),
            interval_seconds=0.01,
        )
    )

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert ticks, "Refresh loop should tick at least once"


def test_background_runner_starts_and_stops() -> None:
    seen = []
    runner = start_refresh_in_background(
        lambda: TaskPartition(),
        seen.append,
        interval_seconds=0.01,
    )
    assert runner is not None

    runner.stop()
    runner.join(timeout=2.0)

    assert not runner.thread.is_alive()
    assert seen, "First tick happens immediately"
