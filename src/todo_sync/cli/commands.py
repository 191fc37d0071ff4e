# src/todo_sync/cli/commands.py

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..tasks.task_errors import TaskNotFoundError, TaskValidationError
from ..tasks.task_models import TaskRecord

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _fmt_ts(ts: float) -> str:
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d %H:%M")


def format_task(task: TaskRecord) -> str:
    mark = "x" if task.completed else " "
    line = f"[{mark}] #{task.id} {task.title}"
    if task.description:
        line += f" - {task.description}"
    return f"{line}  ({_fmt_ts(task.created_at)})"


def format_task_list(tasks: list[TaskRecord], *, header: str | None = None) -> str:
    lines = [header] if header else []
    if not tasks:
        lines.append("No tasks.")
    else:
        lines.extend(format_task(t) for t in tasks)
        done = sum(1 for t in tasks if t.completed)
        lines.append(f"{len(tasks)} tasks, {done} completed.")
    return "\n".join(lines)


def _split_title_description(words: list[str]) -> tuple[str, str | None]:
    """Split `title | description`. Description is None when there is no separator."""
    text = " ".join(words)
    title, sep, description = text.partition("|")
    return title.strip(), (description.strip() if sep else None)


def _parse_id(raw: str) -> int | None:
    try:
        return int(raw.lstrip("#"))
    except ValueError:
        return None


def _load_report(state: AppState, tasks: list[TaskRecord]) -> str:
    err = state.reconciler.last_error
    body = format_task_list(tasks)
    if err is not None:
        return f"{err.user_message()}\n{body}"
    return body


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list          -> all tasks from the last load
    /list <query>  -> tasks whose title contains <query> (case-insensitive)
    """
    query = " ".join(args)
    tasks = state.reconciler.filter_tasks(query)
    header = f"Tasks matching {query!r}:" if query else None
    return format_task_list(tasks, header=header)


def cmd_add(state: AppState, args: list[str]) -> str:
    title, description = _split_title_description(args)
    try:
        task = state.reconciler.create_task(title, description or "")
    except TaskValidationError as e:
        return str(e)
    return f"Added: {format_task(task)}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    usage = "Usage: /edit <id> <title> | <description>"
    if len(args) < 2:
        return usage
    task_id = _parse_id(args[0])
    if task_id is None:
        return usage

    current = state.store.get(task_id)
    if current is None:
        return f"Task #{task_id} not found."

    title, description = _split_title_description(args[1:])
    edited = TaskRecord(
        id=current.id,
        title=title,
        description=current.description if description is None else description,
        completed=current.completed,
        owner_id=current.owner_id,
        created_at=current.created_at,
    )
    try:
        task = state.reconciler.update_task(edited)
    except TaskValidationError as e:
        return str(e)
    except TaskNotFoundError:
        return f"Task #{task_id} not found."
    return f"Updated: {format_task(task)}"


def cmd_done(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None:
        return "Usage: /done <id>"
    try:
        task = state.reconciler.toggle_completion(task_id)
    except TaskNotFoundError:
        return f"Task #{task_id} not found."
    return f"{'Completed' if task.completed else 'Reopened'}: {format_task(task)}"


def cmd_rm(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None:
        return "Usage: /rm <id>"
    task = state.store.get(task_id)
    if task is None:
        return f"Task #{task_id} not found."
    state.reconciler.delete_task(task)
    return f"Deleted task #{task_id}."


def cmd_reload(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    logger.debug("Reload requested from console")
    if emit:
        emit("Reloading tasks...")
    tasks = asyncio.run(state.reconciler.reload())
    return _load_report(state, tasks)


def cmd_sync(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    logger.debug("Remote sync requested from console")
    if emit:
        emit("Fetching remote tasks...")
    before = state.store.count_tasks()
    tasks = asyncio.run(state.reconciler.sync_with_remote())
    if state.reconciler.last_error is not None:
        return _load_report(state, tasks)
    return f"Sync done: {len(tasks) - before} new tasks.\n{format_task_list(tasks)}"


def cmd_status(state: AppState, args: list[str]) -> str:
    rec = state.reconciler
    total = rec.remote_total
    return (
        "Status:\n"
        f"  Load state: {rec.state.value}\n"
        f"  Local tasks: {state.store.count_tasks()}\n"
        f"  Sync state: {state.store.get_sync_state().value}\n"
        f"  Remote total: {total if total is not None else 'n/a'}\n"
        f"  Database: {getattr(state.settings, 'tasks_db_path', '?')}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="List tasks: /list [query].", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add <title> | <description>.")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> <title> | <description>.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.", aliases=["del"])
registry.register("reload", cmd_reload, help_text="Reload tasks (imports remote only if empty).")
registry.register("sync", cmd_sync, help_text="Add remote tasks missing locally.")
registry.register("status", cmd_status, help_text="Show load/sync status.")
