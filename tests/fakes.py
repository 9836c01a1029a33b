# tests/fakes.py

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from pocket_tasks.tasks.task_models import Task


class MemoryStorage:
    """In-memory KeyValueStorage; records every write for assertions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.writes: list[tuple[str, str]] = []

    def get_item(self, key: str) -> str | None:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        self.data[key] = value

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)


class FlakyStorage(MemoryStorage):
    """Fails the writes whose 1-based index is in `fail_on`; reads can be made to fail too."""

    def __init__(self, fail_on: set[int] | None = None, fail_reads: bool = False) -> None:
        super().__init__()
        self.fail_on = fail_on or set()
        self.fail_reads = fail_reads
        self.attempts = 0

    def get_item(self, key: str) -> str | None:
        if self.fail_reads:
            raise OSError("disk unavailable")
        return super().get_item(key)

    def set_item(self, key: str, value: str) -> None:
        self.attempts += 1
        if self.attempts in self.fail_on:
            raise OSError("disk full")
        super().set_item(key, value)


@dataclass(slots=True)
class RecordingSink:
    """SnapshotSink that keeps every submitted snapshot."""

    snapshots: list[tuple[Task, ...]] = field(default_factory=list)

    def submit(self, tasks: Sequence[Task]) -> None:
        self.snapshots.append(tuple(tasks))


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now
