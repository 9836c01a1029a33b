# src/pocket_tasks/tasks/task_api.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import StrEnum
from typing import Any

from .task_models import Priority, Task, utc_now
from .task_store import TaskStore

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"


class InvalidTaskError(ValueError):
    """Caller input that must not reach the store (e.g. an empty title)."""


class SortKey(StrEnum):
    TITLE = "title"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    CREATED_AT = "createdAt"
    COMPLETED_AT = "completedAt"

    @classmethod
    def parse(cls, raw: str | None, default: SortKey) -> SortKey:
        if not raw:
            return default
        lowered = raw.strip().lower()
        for key in cls:
            if key.value.lower() == lowered or key.name.lower().replace("_", "") == lowered:
                return key
        raise InvalidTaskError(f"Unknown sort key: {raw!r}")


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int
    completed: int
    completion_rate: float  # percent, one decimal


# ---- input helpers ----


def validate_title(title: str) -> str:
    if not isinstance(title, str) or title.strip() == "":
        raise InvalidTaskError("Task title cannot be empty")
    return title


def parse_priority(raw: str | Priority) -> Priority:
    if isinstance(raw, Priority):
        return raw
    lowered = str(raw).strip().lower()
    for p in Priority:
        if p.value.lower() == lowered:
            return p
    raise InvalidTaskError(f"Unknown priority: {raw!r} (expected Low, Medium or High)")


def parse_due_date(raw: str) -> datetime:
    """Accept an ISO date (midnight UTC) or an ISO datetime (naive means UTC)."""
    text = (raw or "").strip()
    if not text:
        raise InvalidTaskError("Due date cannot be empty")
    try:
        if len(text) == 10:
            d = date.fromisoformat(text)
            return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
        dt = datetime.fromisoformat(text)
    except ValueError as e:
        raise InvalidTaskError(f"Invalid due date: {raw!r}") from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def new_task_id() -> str:
    return uuid.uuid4().hex


def new_task(
    title: str,
    *,
    category: str = "Work",
    priority: str | Priority = Priority.LOW,
    due_date: datetime | None = None,
    notes: str = "",
    now: datetime | None = None,
) -> Task:
    """
    Build a complete, not-yet-completed task record ready for AddTask.

    The title is validated here, not in the store.
    """
    validate_title(title)
    created = now or utc_now()
    return Task(
        id=new_task_id(),
        title=title,
        category=category,
        priority=parse_priority(priority),
        due_date=due_date or created,
        notes=notes,
        created_at=created,
        completed=False,
        completed_at=None,
    )


def create_task(store: TaskStore, title: str, **fields: Any) -> Task:
    task = new_task(title, **fields)
    store.add_task(task)
    logger.info("Task added id=%s category=%s priority=%s", task.id, task.category, task.priority)
    return task


def edit_task(store: TaskStore, task_id: str, **changes: Any) -> Task | None:
    """
    Validate and apply a partial edit. Returns the updated task,
    or None if no task has this id (the store treats that as a no-op).
    """
    if "title" in changes:
        validate_title(changes["title"])
    if "priority" in changes:
        changes["priority"] = parse_priority(changes["priority"])
    if isinstance(changes.get("due_date"), str):
        changes["due_date"] = parse_due_date(changes["due_date"])

    try:
        store.update_task(task_id, changes)
    except ValueError as e:
        raise InvalidTaskError(str(e)) from e
    return store.get(task_id)


# ---- display queries (never mutate the store) ----


def filter_tasks(
    tasks: Iterable[Task],
    *,
    category: str | None = None,
    query: str = "",
) -> list[Task]:
    needle = (query or "").lower()
    out: list[Task] = []
    for t in tasks:
        if category not in (None, ALL_CATEGORIES) and t.category != category:
            continue
        if needle and needle not in t.title.lower():
            continue
        out.append(t)
    return out


def sort_tasks(tasks: Iterable[Task], by: SortKey = SortKey.CREATED_AT) -> list[Task]:
    items = list(tasks)
    if by == SortKey.TITLE:
        return sorted(items, key=lambda t: t.title.casefold())
    if by == SortKey.DUE_DATE:
        return sorted(items, key=lambda t: t.due_date)
    if by == SortKey.PRIORITY:
        return sorted(items, key=lambda t: t.priority.rank, reverse=True)
    if by == SortKey.COMPLETED_AT:
        return sorted(items, key=lambda t: t.completed_at or t.created_at, reverse=True)
    return sorted(items, key=lambda t: t.created_at, reverse=True)


def completed_view(
    tasks: Iterable[Task],
    *,
    category: str | None = None,
    sort_by: SortKey = SortKey.COMPLETED_AT,
) -> list[Task]:
    done = [t for t in tasks if t.completed]
    return sort_tasks(filter_tasks(done, category=category), sort_by)


def task_stats(tasks: Sequence[Task]) -> TaskStats:
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    rate = round(completed / total * 100, 1) if total else 0.0
    return TaskStats(total=total, completed=completed, completion_rate=rate)


def categories_in_use(tasks: Iterable[Task]) -> list[str]:
    out = [ALL_CATEGORIES]
    for t in tasks:
        if t.category and t.category not in out:
            out.append(t.category)
    return out
