# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from pocket_tasks.core.state import AppState
from pocket_tasks.tasks.task_models import Priority, Task
from pocket_tasks.tasks.task_persistence import SnapshotWriter
from pocket_tasks.tasks.task_store import TaskStore

from .fakes import ManualClock, MemoryStorage, RecordingSink

T0 = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


def make_task(task_id: str, title: str = "", **overrides) -> Task:
    fields = dict(
        id=task_id,
        title=title or f"task {task_id}",
        category="Work",
        priority=Priority.LOW,
        due_date=T0,
        notes="",
        created_at=T0,
    )
    fields.update(overrides)
    return Task(**fields)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any .env file.
    """
    return SimpleNamespace(
        app_name="pocket-test",
        log_level="DEBUG",
        console_enabled=False,
        storage_backend="json",
        storage_key="tasks",
        data_dir=tmp_path / "data",
        json_store_dir=tmp_path / "data" / "storage",
        sqlite_db_path=tmp_path / "data" / "storage.sqlite3",
        default_category="Personal",
    )


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(T0)


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def state(settings: SimpleNamespace, sink: RecordingSink, clock: ManualClock) -> AppState:
    """
    AppState wired with in-memory fakes.

    The store persists into a RecordingSink, so command tests can assert
    on snapshots without running an event loop.
    """
    storage = MemoryStorage()
    return AppState(
        settings=settings,
        storage=storage,
        writer=SnapshotWriter(storage, settings.storage_key),
        task_store=TaskStore(sink, clock=clock),
    )
