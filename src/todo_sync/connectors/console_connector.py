# src/todo_sync/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.events import TaskEvent, TaskEventKind
from ..core.state import AppState
from ..tasks.task_errors import RemoteFetchError

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def describe_event(event: TaskEvent) -> str | None:
    """One-line notice for events worth showing; None for the rest."""
    if event.kind == TaskEventKind.LOAD_FAILED and isinstance(event.error, RemoteFetchError):
        return f"[SYNC] {event.error.user_message()}"
    if event.kind == TaskEventKind.LOADED:
        return f"[SYNC] {len(event.tasks)} tasks loaded."
    if event.kind == TaskEventKind.SYNCED:
        return f"[SYNC] Remote merge done, {len(event.tasks)} tasks."
    return None


def _flush_events(state: AppState) -> None:
    sub = state.subscription
    if sub is None:
        return
    for event in sub.drain():
        notice = describe_event(event)
        if notice:
            _print_ts(notice)


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands, /list to see tasks, /exit to quit.\n")

    if state.subscription is None:
        state.subscription = state.events.subscribe("console")

    def emit(text: str) -> None:
        # Immediate user-visible feedback for long operations (remote fetch).
        print(f"[{_ts_local()}] {text}", flush=True)

    _flush_events(state)

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
            # Bare text is a quick add.
            user_input = f"/add {user_input}"

        try:
            cmd_response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        _flush_events(state)

        if cmd_response is not None:
            print(f"[{_ts_local()}] {cmd_response}")

    state.subscription.close()
    state.subscription = None
    logger.info("Console connector finished.")
