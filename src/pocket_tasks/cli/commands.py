# src/pocket_tasks/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable

from ..core.state import AppState
from ..tasks.task_api import (
    InvalidTaskError,
    SortKey,
    categories_in_use,
    completed_view,
    create_task,
    edit_task,
    filter_tasks,
    parse_due_date,
    sort_tasks,
    task_stats,
)
from ..tasks.task_models import DEFAULT_CATEGORIES, Task

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

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

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except InvalidTaskError as e:
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- parsing / formatting helpers ----


def split_options(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Split ["a", "b", "--key", "v"] into (["a", "b"], {"key": "v"})."""
    words: list[str] = []
    opts: dict[str, str] = {}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg.startswith("--") and len(arg) > 2:
            name = arg[2:].lower()
            if i + 1 >= len(args):
                raise InvalidTaskError(f"Option --{name} needs a value")
            opts[name] = args[i + 1]
            i += 2
            continue
        words.append(arg)
        i += 1
    return words, opts


def resolve_task(state: AppState, ref: str) -> Task:
    """Find a task by full id or unique id prefix."""
    ref = ref.strip()
    if not ref:
        raise InvalidTaskError("Task id is required")
    exact = state.task_store.get(ref)
    if exact is not None:
        return exact
    matches = [t for t in state.task_store.tasks if t.id.startswith(ref)]
    if not matches:
        raise InvalidTaskError(f"No task with id {ref}")
    if len(matches) > 1:
        raise InvalidTaskError(f"Ambiguous id {ref}: matches {len(matches)} tasks")
    return matches[0]


def format_task_line(task: Task) -> str:
    mark = "x" if task.completed else " "
    return (
        f"[{mark}] {task.id[:SHORT_ID_LEN]}  {task.title}  "
        f"({task.category or '-'}, {task.priority.value}, due {task.due_date:%b %d, %Y})"
    )


def format_task_detail(task: Task) -> str:
    lines = [
        f"Title:     {task.title}",
        f"Id:        {task.id}",
        f"Category:  {task.category or '-'}",
        f"Priority:  {task.priority.value}",
        f"Due:       {task.due_date.astimezone():%Y-%m-%d %H:%M}",
        f"Created:   {task.created_at.astimezone():%Y-%m-%d %H:%M}",
        f"Status:    {'completed' if task.completed else 'open'}",
    ]
    if task.completed_at is not None:
        lines.append(f"Completed: {task.completed_at.astimezone():%Y-%m-%d %H:%M}")
    if task.notes:
        lines.append(f"Notes:     {task.notes}")
    return "\n".join(lines)


def _task_fields_from_options(opts: dict[str, str]) -> dict[str, object]:
    fields: dict[str, object] = {}
    if "category" in opts:
        fields["category"] = opts["category"]
    if "priority" in opts:
        fields["priority"] = opts["priority"]
    if "due" in opts:
        fields["due_date"] = parse_due_date(opts["due"])
    if "notes" in opts:
        fields["notes"] = opts["notes"]
    return fields


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    words, opts = split_options(args)
    fields = _task_fields_from_options(opts)
    fields.setdefault("category", getattr(state.settings, "default_category", "Work"))
    task = create_task(state.task_store, " ".join(words), **fields)
    return f"Added {task.id[:SHORT_ID_LEN]}: {task.title}"


def cmd_list(state: AppState, args: list[str]) -> str:
    _, opts = split_options(args)
    sort_by = SortKey.parse(opts.get("sort"), SortKey.CREATED_AT)
    items = filter_tasks(
        state.task_store.tasks,
        category=opts.get("category"),
        query=opts.get("search", ""),
    )
    items = sort_tasks(items, sort_by)
    if not items:
        return "No tasks."
    return "\n".join(format_task_line(t) for t in items)


def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <id>"
    return format_task_detail(resolve_task(state, args[0]))


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <id>"
    task = resolve_task(state, args[0])
    state.task_store.complete_task(task.id)
    updated = state.task_store.get(task.id)
    if updated is not None and updated.completed:
        return f"Completed: {updated.title}"
    return f"Reopened: {task.title}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    words, opts = split_options(args)
    if not words:
        return "Usage: /edit <id> [--title T] [--category C] [--priority P] [--due DATE] [--notes N]"
    task = resolve_task(state, words[0])
    changes = _task_fields_from_options(opts)
    if "title" in opts:
        changes["title"] = opts["title"]
    if not changes:
        return "Nothing to change."
    updated = edit_task(state.task_store, task.id, **changes)
    return f"Updated {task.id[:SHORT_ID_LEN]}: {(updated or task).title}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <id>"
    task = resolve_task(state, args[0])
    state.task_store.delete_task(task.id)
    return f"Deleted: {task.title}"


def cmd_completed(state: AppState, args: list[str]) -> str:
    _, opts = split_options(args)
    sort_by = SortKey.parse(opts.get("sort"), SortKey.COMPLETED_AT)
    items = completed_view(state.task_store.tasks, category=opts.get("category"), sort_by=sort_by)
    if not items:
        return "No completed tasks."
    return "\n".join(format_task_line(t) for t in items)


def cmd_stats(state: AppState, args: list[str]) -> str:
    stats = task_stats(state.task_store.tasks)
    return (
        f"Total: {stats.total} | Completed: {stats.completed} | "
        f"Completion rate: {stats.completion_rate}%"
    )


def cmd_categories(state: AppState, args: list[str]) -> str:
    return ", ".join(categories_in_use(state.task_store.tasks))


def cmd_exit(state: AppState, args: list[str]) -> str:
    # The console loop intercepts /exit before dispatching; other callers just get a hint.
    return "Use /exit at the console prompt to quit."


registry.register("help", cmd_help, "show this help", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    f"add a task: /add <title> [--category {'|'.join(DEFAULT_CATEGORIES)}|...] "
    "[--priority Low|Medium|High] [--due YYYY-MM-DD] [--notes N]",
    aliases=["a"],
)
registry.register(
    "list",
    cmd_list,
    "list tasks: /list [--category C] [--search TEXT] [--sort title|dueDate|priority|createdAt]",
    aliases=["ls"],
)
registry.register("show", cmd_show, "show one task: /show <id>")
registry.register("done", cmd_done, "toggle completion: /done <id>", aliases=["complete"])
registry.register("edit", cmd_edit, "edit fields: /edit <id> [--title T] [--category C] ...")
registry.register("delete", cmd_delete, "delete a task: /delete <id>", aliases=["rm", "del"])
registry.register(
    "completed",
    cmd_completed,
    "completed tasks: /completed [--category C] [--sort completedAt|title|dueDate|priority]",
)
registry.register("stats", cmd_stats, "totals and completion rate")
registry.register("categories", cmd_categories, "categories in use")
registry.register("exit", cmd_exit, "save pending changes and quit", aliases=["quit"])
