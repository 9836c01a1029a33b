# src/pocket_tasks/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_persistence import SnapshotWriter
from ..tasks.task_store import TaskStore
from .ports import KeyValueStorage


@dataclass
class AppState:
    # Settings live on the state so handlers don't read global config.
    settings: Any

    storage: KeyValueStorage
    writer: SnapshotWriter
    task_store: TaskStore
