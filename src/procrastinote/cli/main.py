# src/procrastinote/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, publishes a first glance snapshot, then
runs the console REPL alongside the periodic glance refresher.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..errors import PersistenceError
from ..glance.glance_refresher import refresh_glance, run_glance_refresher
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def run_app(state: AppState) -> None:
    try:
        refresh_glance(state.store, state.glance)
    except (PersistenceError, OSError):
        logger.exception("Initial glance refresh failed.")

    interval_s = max(1, int(getattr(state.settings, "glance_refresh_minutes", 30))) * 60
    refresher = asyncio.create_task(
        run_glance_refresher(state.store, state.glance, interval_seconds=interval_s)
    )
    try:
        await run_console_loop(state)
    finally:
        refresher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await refresher

        # Final snapshot so the widget reflects the session's last change.
        try:
            refresh_glance(state.store, state.glance)
        except (PersistenceError, OSError):
            logger.exception("Final glance refresh failed.")


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    file_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/procrastinote")
    setup_logging(log_dir=log_dir, file_level=file_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "Procrastinote"))

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    try:
        asyncio.run(run_app(state))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        close = getattr(state.store, "close", None)
        if close is not None:
            close()
        logger.info("Bye.")


if __name__ == "__main__":
    main()
