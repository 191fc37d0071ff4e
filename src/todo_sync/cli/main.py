# src/todo_sync/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, runs the first task load, then starts
the console REPL in the main thread.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    if state.subscription is not None:
        state.subscription.close()
        state.subscription = None

    # TaskStore uses short-lived sqlite connections per call; close() is a no-op hook.
    try:
        close = getattr(state.store, "close", None)
        if close is not None:
            close()
    except Exception:
        logger.debug("Store close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "log_dir", ".local/todo")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "todo"))

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    # Subscribe before the first load so the console sees its outcome.
    state.subscription = state.events.subscribe("console")
    asyncio.run(state.reconciler.load_initial_tasks())

    try:
        if settings.console_enabled:
            run_console_loop(state)
        else:
            logger.info(
                "Console disabled. Loaded %d tasks; nothing else to do.",
                len(state.reconciler.snapshot),
            )
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
