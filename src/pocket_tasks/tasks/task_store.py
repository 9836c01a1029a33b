# src/pocket_tasks/tasks/task_store.py

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from ..core.ports import Clock, KeyValueStorage, SnapshotSink
from .task_actions import (
    Action,
    AddTask,
    CompleteTask,
    DeleteTask,
    LoadTasks,
    UpdateTask,
    is_mutating,
)
from .task_models import Task, utc_now
from .task_persistence import DEFAULT_STORAGE_KEY, hydrate_tasks
from .task_reducer import reduce_tasks

logger = logging.getLogger(__name__)

Listener = Callable[[tuple[Task, ...]], None]


class TaskStore:
    """
    Owned container for the task list.

    The whole state is one immutable tuple, replaced on every dispatch.
    Single-writer: dispatch() is the only way to change it, and the
    read-reduce-replace step runs under a lock so the console thread and the
    event loop can't interleave transitions.

    After each mutating action the new tuple is handed to `sink`
    (normally a SnapshotWriter). The sink must not block.
    """

    def __init__(self, sink: SnapshotSink | None = None, *, clock: Clock | None = None) -> None:
        self._sink = sink
        self._clock: Clock = clock or utc_now
        self._tasks: tuple[Task, ...] = ()
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []
        self._hydrated = False

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    @property
    def hydrated(self) -> bool:
        return self._hydrated

    def get(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener(new_tasks)` after every dispatch. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> tuple[Task, ...]:
        with self._lock:
            new_state = reduce_tasks(self._tasks, action, now=self._clock())
            self._tasks = new_state
            if is_mutating(action) and self._sink is not None:
                self._sink.submit(new_state)

        logger.debug("Dispatched %s -> %d tasks", type(action).__name__, len(new_state))

        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("Task store listener failed.")

        return new_state

    async def hydrate(self, storage: KeyValueStorage, key: str = DEFAULT_STORAGE_KEY) -> tuple[Task, ...]:
        """Load persisted tasks into the store. Runs once per store; later calls are ignored."""
        if self._hydrated:
            logger.warning("TaskStore already hydrated; ignoring repeated hydrate().")
            return self._tasks

        tasks = await hydrate_tasks(storage, key)
        self._hydrated = True
        return self.dispatch(LoadTasks(tuple(tasks)))

    # ---- intents (one per action kind) ----

    def add_task(self, task: Task) -> tuple[Task, ...]:
        return self.dispatch(AddTask(task))

    def delete_task(self, task_id: str) -> tuple[Task, ...]:
        return self.dispatch(DeleteTask(task_id))

    def complete_task(self, task_id: str) -> tuple[Task, ...]:
        return self.dispatch(CompleteTask(task_id))

    def update_task(self, task_id: str, changes: Mapping[str, Any]) -> tuple[Task, ...]:
        return self.dispatch(UpdateTask(task_id, changes))
