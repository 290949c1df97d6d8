# src/medsync/tasks/task_scheduler.py

from __future__ import annotations

"""
Expiry refresh loop.

A small polling loop that, every interval:
- reloads the full task list and re-partitions it for the current time,
- hands the partition to a callback (the console prints newly expired tasks).

Nothing is written back: expiry is derived from the clock on every tick.
"""

import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from .task_models import Task, TaskPartition

logger = logging.getLogger(__name__)

BoardLoader = Callable[[], TaskPartition]
RefreshCallback = Callable[[TaskPartition], None]


class HistoryWatch:
    """
    Remembers which tasks were active on the previous tick.

    update() returns the tasks that were active last time and are history now.
    A task created with an end time already in the past never was active, so
    it is not reported. The first call only records the baseline.
    """

    def __init__(self) -> None:
        self._active: set[int] | None = None

    def update(self, partition: TaskPartition) -> list[Task]:
        previous = self._active
        self._active = {t.id for t in partition.active}
        if previous is None:
            return []
        return [t for t in partition.history if t.id in previous]


async def run_expiry_refresh(
        load_board: BoardLoader,
        on_refresh: RefreshCallback,
        *,
        interval_seconds: float = 30.0,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Re-run the full task partition every interval_seconds.

    Failures of a single tick are logged and the loop keeps going.
    To stop the loop, set stop_event or cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        logger.debug("Checking for expired tasks...")
        try:
            partition = load_board()
        except Exception:
            logger.exception("load_board failed")
            partition = None

        if partition is not None:
            try:
                on_refresh(partition)
            except Exception:
                logger.exception("refresh callback failed")

        if stop_event is None:
            await asyncio.sleep(sleep_s)
            continue

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)
        except asyncio.TimeoutError:
            continue
        logger.info("Expiry refresh loop stopped.")
        return


@dataclass
class ExpiryRefreshRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Refresh loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_refresh_in_background(
        load_board: BoardLoader,
        on_refresh: RefreshCallback,
        *,
        interval_seconds: float = 30.0,
) -> ExpiryRefreshRunner | None:
    """
    Run the refresh loop in a background thread with its own event loop,
    so the blocking console REPL can keep the main thread.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_expiry_refresh(
                    load_board,
                    on_refresh,
                    interval_seconds=interval_seconds,
                    stop_event=stop_event,
                )
            )
        finally:
            with contextlib.suppress(RuntimeError):
                loop.close()

    t = threading.Thread(target=runner, name="medsync-expiry-refresh", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Refresh thread did not initialize properly.")
        return None

    logger.info("Expiry refresh started (every %.0fs).", interval_seconds)
    return ExpiryRefreshRunner(thread=t, loop=loop, stop_event=stop_event)
