# src/pocket_tasks/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires storage, snapshot writer and task store into AppState,
- runs hydration exactly once before any intent is handled.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_persistence import SnapshotWriter
from ..tasks.task_storage import open_storage
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.json_store_dir.mkdir(parents=True, exist_ok=True)
    settings.sqlite_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    storage = open_storage(
        settings.storage_backend,
        json_dir=settings.json_store_dir,
        sqlite_path=settings.sqlite_db_path,
    )
    writer = SnapshotWriter(storage, settings.storage_key)

    return AppState(
        settings=settings,
        storage=storage,
        writer=writer,
        task_store=TaskStore(writer),
    )


async def start_state(state: AppState) -> None:
    """Start the snapshot writer and hydrate the store. Must run inside the event loop."""
    state.writer.start()
    tasks = await state.task_store.hydrate(state.storage, state.settings.storage_key)
    logger.info("Task store ready: %d tasks (backend=%s)", len(tasks), state.settings.storage_backend)


async def stop_state(state: AppState) -> None:
    """Drain pending snapshots. Best-effort: never raises."""
    try:
        await state.writer.aclose()
    except Exception:
        logger.exception("Failed to drain snapshot writer.")
