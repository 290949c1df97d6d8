# src/medsync/connectors/console_connector.py

from __future__ import annotations

import logging
import shlex
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..storage.database import StoreError
from ..tasks.task_models import TaskPartition
from ..tasks.task_scheduler import HistoryWatch

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def make_refresh_printer(watch: HistoryWatch | None = None):
    """
    Build the refresh-loop callback for the console: prints one line per task
    that has just moved from the active list to history.
    """
    watch = watch or HistoryWatch()

    def on_refresh(partition: TaskPartition) -> None:
        moved = watch.update(partition)
        for task in moved:
            _print_ts(f"[TASKS] #{task.id} {task.title!r} ended at {task.end}; moved to history.")
        if moved:
            _print_ts(f"[TASKS] {partition.active_label} / {partition.history_label}")

    return on_refresh


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (store=%s).", "ok" if state.store_available else "unavailable")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    if not state.store_available:
        _print_ts("[ALERT] Database init failed: tasks and notes are unavailable this session.")

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            # Plain text is a quick task title, like pressing Enter in the title field.
            user_input = "/task add " + shlex.quote(user_input)

        try:
            with state.lock:
                response = command_registry.handle(state, user_input)
        except StoreError as e:
            logger.error("Storage error while handling %r: %s", user_input, e)
            response = f"Storage error: {e}"
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            print(f"[{_ts_local()}] {response}")

    logger.info("Console connector finished.")
