# src/pocket_tasks/tasks/task_actions.py

from __future__ import annotations

"""
Actions understood by the task reducer.

The set is closed: Action is a union of frozen dataclasses, so type checkers
can verify that every kind is handled. Anything else reaching the reducer is
treated as an identity transition.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

from .task_models import EDITABLE_FIELDS, Task


@dataclass(slots=True, frozen=True)
class LoadTasks:
    """Replace the whole list. Used only at hydration."""

    tasks: tuple[Task, ...]


@dataclass(slots=True, frozen=True)
class AddTask:
    task: Task


@dataclass(slots=True, frozen=True)
class DeleteTask:
    task_id: str


@dataclass(slots=True, frozen=True)
class CompleteTask:
    """Toggle completion of one task."""

    task_id: str


@dataclass(slots=True, frozen=True)
class UpdateTask:
    """Merge `changes` into the task with `task_id`; unnamed fields stay as they are."""

    task_id: str
    changes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = set(self.changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"fields cannot be updated: {', '.join(sorted(unknown))}")
        # Freeze a private copy so the caller's dict can't leak into state later.
        object.__setattr__(self, "changes", MappingProxyType(dict(self.changes)))


Action = Union[LoadTasks, AddTask, DeleteTask, CompleteTask, UpdateTask]

# Actions after which the new state is written to durable storage.
MUTATING_ACTIONS: tuple[type, ...] = (AddTask, DeleteTask, CompleteTask, UpdateTask)


def is_mutating(action: object) -> bool:
    return isinstance(action, MUTATING_ACTIONS)
