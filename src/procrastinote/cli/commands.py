# src/procrastinote/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..errors import CalendarError, PermissionDenied, PersistenceError, ProcrastinoteError, ValidationError
from ..glance.glance_refresher import refresh_glance
from ..glance.shared_defaults import render_glance
from ..tasks import task_api
from ..tasks.task_models import DEFAULT_ESTIMATED_TIME, Category, Task, TaskStatus
from ..tasks.task_stats import (
    count_by_category,
    group_tasks_by_category,
    progress_snapshot,
    time_by_category,
)

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

STATUS_ALIASES = {
    "n": TaskStatus.NOT_STARTED,
    "new": TaskStatus.NOT_STARTED,
    "not-started": TaskStatus.NOT_STARTED,
    "todo": TaskStatus.NOT_STARTED,
    "p": TaskStatus.IN_PROGRESS,
    "in-progress": TaskStatus.IN_PROGRESS,
    "doing": TaskStatus.IN_PROGRESS,
    "c": TaskStatus.COMPLETE,
    "complete": TaskStatus.COMPLETE,
    "done": TaskStatus.COMPLETE,
}

DATE_FORMATS = ("%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M")


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

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

        Expected failures (validation, storage, calendar) become the reply text.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Cannot parse command: {e}."
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

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ValidationError as e:
            return f"Invalid input: {e}."
        except PersistenceError as e:
            logger.error("Command /%s not applied: %s", name, e)
            return f"Could not save changes, nothing was modified ({e})."
        except ProcrastinoteError as e:
            return f"Error: {e}."

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----

def _split_options(args: list[str], allowed: set[str]) -> tuple[list[str], dict[str, str]]:
    """Split ["a", "b", "--due", "2025-01-01"] into positionals and {"due": "2025-01-01"}."""
    positional: list[str] = []
    options: dict[str, str] = {}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg.startswith("--"):
            key = arg[2:].lower()
            if key not in allowed:
                raise ValidationError(f"unknown option --{key}")
            if i + 1 >= len(args):
                raise ValidationError(f"option --{key} needs a value")
            options[key] = args[i + 1]
            i += 2
            continue
        positional.append(arg)
        i += 1
    return positional, options


def _parse_date(raw: str) -> datetime:
    if raw.lower() == "today":
        return datetime.now().replace(second=0, microsecond=0)
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    raise ValidationError(f"unrecognized date {raw!r} (use YYYY-MM-DD or YYYY-MM-DDTHH:MM)")


def _parse_hours(raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"hours must be a number, got {raw!r}") from None


def _parse_status(raw: str) -> TaskStatus:
    status = STATUS_ALIASES.get(raw.lower())
    if status is None:
        raise ValidationError(f"unknown status {raw!r} (not-started | in-progress | complete)")
    return status


def _find_task(state: AppState, ref: str) -> Task:
    ref = ref.strip().lstrip("#")
    if not ref:
        raise ValidationError("task id is required")
    matches = [t for t in state.store.list_tasks() if t.id.startswith(ref)]
    if not matches:
        raise ValidationError(f"no task matches {ref!r}")
    if len(matches) > 1:
        raise ValidationError(f"{ref!r} matches {len(matches)} tasks, use a longer id")
    return matches[0]


def _find_category(state: AppState, ref: str) -> Category:
    ref = ref.strip()
    categories = state.store.list_categories()
    by_name = [c for c in categories if c.name.lower() == ref.lower()]
    if len(by_name) == 1:
        return by_name[0]
    by_id = [c for c in categories if ref and c.id.startswith(ref.lstrip("#"))]
    if len(by_id) == 1:
        return by_id[0]
    if by_name or len(by_id) > 1:
        raise ValidationError(f"category {ref!r} is ambiguous, use its id")
    raise ValidationError(f"no category matches {ref!r}")


def _short(entity_id: str) -> str:
    return entity_id[:8]


def _format_task(task: Task) -> list[str]:
    mark = "x" if task.is_complete else ("~" if task.status is TaskStatus.IN_PROGRESS else " ")
    extras = f"due {task.due_date:%Y-%m-%d}, {task.estimated_time:.1f} hrs"
    if task.event_identifier:
        extras += ", in calendar"
    lines = [f"  [{mark}] {task.title}  ({extras})  #{_short(task.id)}"]
    if task.detail:
        lines.append(f"        {task.detail}")
    return lines


def _refresh_glance(state: AppState) -> None:
    """Explicit refresh trigger after a change; a failure only affects the widget copy."""
    try:
        refresh_glance(state.store, state.glance)
    except (PersistenceError, OSError):
        logger.exception("Glance refresh after change failed")


# ---- commands ----

def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list            -> all tasks grouped by category
    /list <status>   -> only tasks in that status
    """
    status = _parse_status(args[0]) if args else None
    tasks = task_api.list_tasks(state.store, status=status)
    if not tasks:
        return "No tasks." if status is None else f"No tasks with status {status.value}."

    categories = state.store.list_categories()
    lines = ["Tasks:"]
    for label, group in group_tasks_by_category(tasks, categories):
        lines.append(f"{label}:")
        for task in group:
            lines.extend(_format_task(task))
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    """/add <title> [--due DATE] [--hours H] [--cat CATEGORY] [--note TEXT]"""
    positional, opts = _split_options(args, {"due", "hours", "cat", "note"})
    title = " ".join(positional)
    category_id = _find_category(state, opts["cat"]).id if "cat" in opts else None

    task = task_api.add_task(
        state.store,
        title,
        due_date=_parse_date(opts["due"]) if "due" in opts else None,
        detail=opts.get("note"),
        estimated_time=_parse_hours(opts["hours"]) if "hours" in opts else DEFAULT_ESTIMATED_TIME,
        category_id=category_id,
    )
    _refresh_glance(state)
    return f"Task saved: {task.title} #{_short(task.id)}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <task> [--title T] [--note T] [--due DATE] [--hours H] [--cat CATEGORY|none] [--status S]"""
    positional, opts = _split_options(args, {"title", "note", "due", "hours", "cat", "status"})
    if len(positional) != 1:
        return "Usage: /edit <task> [--title T] [--note T] [--due DATE] [--hours H] [--cat C|none] [--status S]"
    if not opts:
        return "Nothing to change."

    task = _find_task(state, positional[0])
    changes: dict[str, object] = {}
    if "title" in opts:
        changes["title"] = opts["title"]
    if "note" in opts:
        changes["detail"] = opts["note"]
    if "due" in opts:
        changes["due_date"] = _parse_date(opts["due"])
    if "hours" in opts:
        changes["estimated_time"] = _parse_hours(opts["hours"])
    if "cat" in opts:
        changes["category_id"] = None if opts["cat"].lower() == "none" else _find_category(state, opts["cat"]).id
    if "status" in opts:
        changes["status"] = _parse_status(opts["status"])

    updated = task_api.edit_task(state.store, task, **changes)  # type: ignore[arg-type]
    _refresh_glance(state)
    return f"Task updated: {updated.title} #{_short(updated.id)}"


def cmd_toggle(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /toggle <task>"
    task = _find_task(state, args[0])
    updated = task_api.toggle_task_status(state.store, task)
    _refresh_glance(state)
    return f"{updated.title}: {task.status.value} -> {updated.status.value}"


def cmd_rm(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /rm <task>"
    task = _find_task(state, args[0])
    task_api.delete_task(state.store, task.id)
    _refresh_glance(state)
    return f"Task deleted: {task.title}"


def cmd_clear(state: AppState, args: list[str]) -> str:
    """
    /clear      -> show how many completed tasks would be deleted
    /clear yes  -> delete them
    """
    if not args or args[0].lower() not in ("yes", "y"):
        n = len(state.store.list_tasks(status=TaskStatus.COMPLETE))
        if n == 0:
            return "No completed tasks to clear."
        return f"This will permanently delete {n} completed task(s). Run /clear yes to confirm."

    removed = task_api.clear_completed(state.store)
    _refresh_glance(state)
    return f"Cleared completed tasks ({removed})."


def cmd_cat(state: AppState, args: list[str]) -> str:
    """
    /cat           -> list categories
    /cat add NAME  -> create a category
    /cat rm NAME   -> delete a category (its tasks become Uncategorized)
    """
    sub = args[0].lower() if args else "ls"

    if sub in ("ls", "list"):
        categories = task_api.list_categories(state.store)
        if not categories:
            return "No categories yet. Use /cat add NAME."
        lines = ["Categories:"]
        for c in categories:
            lines.append(f"  {c.name}  #{_short(c.id)}")
        return "\n".join(lines)

    if sub == "add":
        category = task_api.add_category(state.store, " ".join(args[1:]))
        return f"Category created: {category.name}"

    if sub in ("rm", "del"):
        if len(args) < 2:
            return "Usage: /cat rm NAME"
        category = _find_category(state, " ".join(args[1:]))
        task_api.delete_category(state.store, category.id)
        return f"Category deleted: {category.name}"

    return "Usage: /cat [ls] | /cat add NAME | /cat rm NAME"


def cmd_hub(state: AppState, args: list[str]) -> str:
    """Time summary: estimated hours per category."""
    totals = time_by_category(state.store.list_tasks(), state.store.list_categories())
    if not totals:
        return "No task data yet."
    lines = ["Time summary:"]
    for name, hours in totals:
        lines.append(f"  {name}: {hours:.1f} hrs")
    return "\n".join(lines)


def cmd_dash(state: AppState, args: list[str]) -> str:
    """Dashboard: completion rate, tasks per category and the widget glance."""
    tasks = state.store.list_tasks()
    progress = progress_snapshot(tasks)

    lines = [
        "Task overview:",
        f"  {int(progress.completion_rate * 100)}% complete ({progress.completed_count}/{progress.total_count})",
    ]
    counts = count_by_category(tasks, state.store.list_categories())
    if counts:
        lines.append("Tasks by category:")
        width = max(len(name) for name, _ in counts)
        for name, n in counts:
            lines.append(f"  {name.ljust(width)} {'#' * n} {n}")
    lines.append(f"Widget: {render_glance(state.glance.read())}")
    return "\n".join(lines)


async def _export_and_report(state: AppState, task: Task, emit: CommandEmitter | None) -> None:
    try:
        updated = await task_api.export_task_to_calendar(state.store, state.calendar, task)
        msg = f"Added to calendar: {updated.title}"
    except PermissionDenied:
        msg = f"Calendar access denied; {task.title} was not exported."
    except CalendarError as e:
        msg = f"Calendar write failed for {task.title}: {e}"
    except PersistenceError as e:
        logger.error("Calendar export not recorded task_id=%s: %s", task.id, e)
        msg = f"{task.title} was not added to the calendar ({e})."
    if emit is not None:
        emit(msg)


def cmd_cal(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/cal <task> -> export the task to the calendar in the background."""
    if len(args) != 1:
        return "Usage: /cal <task>"
    task = _find_task(state, args[0])
    state.spawn(_export_and_report(state, task, emit))
    return f"Exporting {task.title} to the calendar..."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="List tasks grouped by category: /list [status].", aliases=["ls"])
registry.register(
    "add",
    cmd_add,
    help_text='Add a task: /add "Title" [--due YYYY-MM-DD] [--hours 1.5] [--cat NAME] [--note TEXT].',
)
registry.register(
    "edit",
    cmd_edit,
    help_text="Edit a task: /edit ID [--title] [--note] [--due] [--hours] [--cat NAME|none] [--status S].",
)
registry.register("toggle", cmd_toggle, help_text="Toggle a task between not started and complete.", aliases=["t"])
registry.register("rm", cmd_rm, help_text="Delete a task: /rm ID.")
registry.register("clear", cmd_clear, help_text="Delete all completed tasks: /clear yes.")
registry.register("cat", cmd_cat, help_text="Categories: /cat | /cat add NAME | /cat rm NAME.")
registry.register("hub", cmd_hub, help_text="Estimated hours per category.")
registry.register("dash", cmd_dash, help_text="Completion overview and tasks per category.")
registry.register("cal", cmd_cal, help_text="Add a task to the calendar: /cal ID.")
