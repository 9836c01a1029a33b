# src/pocket_tasks/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

DEFAULT_CATEGORIES: tuple[str, ...] = ("Work", "Personal", "Urgent")


class Priority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def from_db(cls, raw: str | None) -> Priority:
        """Lenient decode for stored records: anything unknown is treated as Low."""
        if not raw:
            return cls.LOW
        try:
            return cls(raw)
        except ValueError:
            return cls.LOW


_PRIORITY_RANK = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}


@dataclass(slots=True, frozen=True)
class Task:
    """
    One to-do item.

    Invariant: completed_at is set if and only if completed is True.
    Instances are immutable; every transition builds a new record.
    """

    id: str
    title: str
    category: str
    priority: Priority
    due_date: datetime
    notes: str
    created_at: datetime
    completed: bool = False
    completed_at: datetime | None = None


# Fields an UpdateTask may touch. id/created_at are immutable, completion has its own action.
EDITABLE_FIELDS = frozenset({"title", "category", "priority", "due_date", "notes"})


# ---- timestamps ----


def utc_now() -> datetime:
    """Current UTC time truncated to milliseconds (the stored precision)."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def format_timestamp(dt: datetime) -> str:
    """UTC, millisecond precision, 'Z' suffix: 2024-05-01T09:30:00.000Z"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: Any) -> datetime:
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError(f"timestamp must be a non-empty string, got {raw!r}")
    dt = datetime.fromisoformat(raw.strip())
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


# ---- JSON record codec ----


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "category": task.category,
        "priority": task.priority.value,
        "dueDate": format_timestamp(task.due_date),
        "notes": task.notes,
        "completed": task.completed,
        "createdAt": format_timestamp(task.created_at),
        "completedAt": format_timestamp(task.completed_at) if task.completed_at else None,
    }


def task_from_record(record: Any) -> Task:
    """
    Decode one stored record.

    Raises ValueError for records that cannot represent a task
    (not an object, missing id/title, broken timestamps).
    """
    if not isinstance(record, dict):
        raise ValueError(f"task record must be an object, got {type(record).__name__}")

    task_id = record.get("id")
    if not isinstance(task_id, str) or not task_id:
        raise ValueError(f"task record has no usable id: {task_id!r}")

    title = record.get("title")
    if not isinstance(title, str) or not title:
        raise ValueError(f"task {task_id} has no title")

    # Only a real JSON boolean counts; anything else ("false", 1, null) is open.
    completed = record.get("completed") is True
    created_at = parse_timestamp(record.get("createdAt"))

    raw_completed_at = record.get("completedAt")
    if not completed:
        # A stale completedAt on an open task is dropped.
        completed_at = None
    elif raw_completed_at:
        completed_at = parse_timestamp(raw_completed_at)
    else:
        # Completed but no timestamp: fall back to creation time.
        completed_at = created_at

    return Task(
        id=task_id,
        title=title,
        category=str(record.get("category") or ""),
        priority=Priority.from_db(record.get("priority")),
        due_date=parse_timestamp(record.get("dueDate")),
        notes=str(record.get("notes") or ""),
        created_at=created_at,
        completed=completed,
        completed_at=completed_at,
    )
