# src/medsync/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (restoring the planner database from
local storage), starts the expiry refresh loop in a background thread, then
runs the console REPL in the main thread.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import get_settings
from ..connectors.console_connector import make_refresh_printer, run_console_loop
from ..logging_setup import setup_logging
from ..tasks.task_api import load_task_board
from ..tasks.task_scheduler import ExpiryRefreshRunner, start_refresh_in_background

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)

    refresh_runner: ExpiryRefreshRunner | None = None
    if settings.refresh_enabled and state.store_available:

        def load_board():
            with state.lock:
                return load_task_board(state)

        refresh_runner = start_refresh_in_background(
            load_board,
            make_refresh_printer(),
            interval_seconds=settings.expiry_refresh_seconds,
        )

    try:
        run_console_loop(state)
    finally:
        if refresh_runner is not None:
            refresh_runner.stop()
            refresh_runner.join(timeout=5.0)

        shutdown_state(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
