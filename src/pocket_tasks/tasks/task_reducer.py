# src/pocket_tasks/tasks/task_reducer.py

from __future__ import annotations

"""
Pure state transition for the task list.

reduce_tasks(tasks, action) -> new tasks

No I/O and no logging here. Given the same input and `now`, the output is
always the same, so it is safe to call on the synchronous dispatch path.
"""

from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime

from .task_actions import Action, AddTask, CompleteTask, DeleteTask, LoadTasks, UpdateTask
from .task_models import Task, utc_now


def _index_of(tasks: Sequence[Task], task_id: str) -> int | None:
    for i, task in enumerate(tasks):
        if task.id == task_id:
            return i
    return None


def _replace_at(tasks: tuple[Task, ...], index: int, task: Task) -> tuple[Task, ...]:
    return tasks[:index] + (task,) + tasks[index + 1 :]


def toggle_completed(task: Task, now: datetime) -> Task:
    if task.completed:
        return replace(task, completed=False, completed_at=None)
    return replace(task, completed=True, completed_at=now)


def reduce_tasks(
    tasks: Sequence[Task],
    action: Action,
    *,
    now: datetime | None = None,
) -> tuple[Task, ...]:
    """
    Apply one action.

    - LoadTasks    -> replaces the whole list
    - AddTask      -> prepends (newest first)
    - DeleteTask   -> drops the matching task
    - CompleteTask -> flips completed, sets/clears completed_at
    - UpdateTask   -> merges the given fields

    An id that matches nothing is a no-op, as is an unknown action.
    """
    current = tuple(tasks)

    if isinstance(action, LoadTasks):
        return tuple(action.tasks)

    if isinstance(action, AddTask):
        return (action.task,) + current

    if isinstance(action, DeleteTask):
        idx = _index_of(current, action.task_id)
        if idx is None:
            return current
        return current[:idx] + current[idx + 1 :]

    if isinstance(action, CompleteTask):
        idx = _index_of(current, action.task_id)
        if idx is None:
            return current
        ts = now if now is not None else utc_now()
        return _replace_at(current, idx, toggle_completed(current[idx], ts))

    if isinstance(action, UpdateTask):
        idx = _index_of(current, action.task_id)
        if idx is None:
            return current
        return _replace_at(current, idx, replace(current[idx], **action.changes))

    return current
