# src/pocket_tasks/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task store.

The store depends on Protocols instead of concrete implementations.
This keeps storage backends swappable and makes testing easier.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol


class KeyValueStorage(Protocol):
    """
    Durable string slots addressed by key (AsyncStorage-like).

    Methods are blocking; async callers run them in a worker thread.
    """

    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class SnapshotSink(Protocol):
    """Accepts full task-list snapshots after each mutation. Must not block."""

    def submit(self, tasks: Sequence[Any]) -> None: ...


class Clock(Protocol):
    def __call__(self) -> datetime: ...
