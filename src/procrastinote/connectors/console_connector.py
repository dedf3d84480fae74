# src/procrastinote/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


async def run_console_loop(state: AppState) -> None:
    """
    Interactive REPL.

    input() runs in a worker thread so background work (calendar exports,
    glance refresh) keeps running on the event loop while we wait.
    """
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "Procrastinote"))
    logger.info("Console connector started.")
    _print_ts(f"[{app_name}] Use /help for commands. Use /exit to quit.\n")

    def emit(text: str) -> None:
        # Results of background work (calendar export) arrive here.
        print(f"\n[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, "> ")).strip()
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
            user_input = "/" + user_input

        try:
            response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            _print_ts(response)

    if state.pending:
        _print_ts(f"Waiting for {len(state.pending)} calendar export(s)...")
        await state.drain()

    logger.info("Console connector finished.")
