# src/pocket_tasks/tasks/task_persistence.py

from __future__ import annotations

"""
Persistence synchronizer.

- hydrate_tasks(): read the durable slot once at startup (fails open to []).
- SnapshotWriter: ordered, fire-and-forget writer of whole-list snapshots.

Every write carries the full list as it was right after the triggering
transition, so the slot always holds a self-consistent snapshot and the
last write wins.
"""

import asyncio
import json
import logging
from collections.abc import Sequence

from ..core.ports import KeyValueStorage
from .task_models import Task, task_from_record, task_to_record

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "tasks"


def encode_snapshot(tasks: Sequence[Task]) -> str:
    return json.dumps([task_to_record(t) for t in tasks], ensure_ascii=False)


def decode_snapshot(raw: str | None) -> list[Task]:
    """
    Parse a stored snapshot.

    Never raises: unparsable JSON or a non-array value gives [].
    Records that fail to decode (or repeat an id) are skipped.
    """
    if raw is None or not raw.strip():
        return []

    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Stored task snapshot is not valid JSON; starting with an empty list.")
        return []

    if data is None:
        return []
    if not isinstance(data, list):
        logger.warning(
            "Stored task snapshot is a %s, expected a list; starting with an empty list.",
            type(data).__name__,
        )
        return []

    out: list[Task] = []
    seen: set[str] = set()
    for i, record in enumerate(data):
        try:
            task = task_from_record(record)
        except ValueError as e:
            logger.warning("Skipping stored task #%d: %s", i, e)
            continue
        if task.id in seen:
            logger.warning("Skipping stored task #%d: duplicate id %s", i, task.id)
            continue
        seen.add(task.id)
        out.append(task)
    return out


async def hydrate_tasks(storage: KeyValueStorage, key: str = DEFAULT_STORAGE_KEY) -> list[Task]:
    """Load the persisted list. Missing or broken data yields an empty list, never an error."""
    try:
        raw = await asyncio.to_thread(storage.get_item, key)
    except Exception:
        logger.exception("Failed to read task snapshot key=%s; starting with an empty list.", key)
        return []

    if raw is None:
        logger.info("No task snapshot under key=%s; starting with an empty list.", key)
        return []

    tasks = decode_snapshot(raw)
    logger.info("Hydrated %d tasks from key=%s", len(tasks), key)
    return tasks


class SnapshotWriter:
    """
    Writes task-list snapshots to a KeyValueStorage in submission order.

    Lifecycle:
    - start() inside the running event loop (spawns the consumer)
    - submit() from any thread; never blocks, never raises
    - flush() to wait for everything submitted so far
    - aclose() drains pending snapshots and stops the consumer

    A failed write is logged and dropped. There is no retry and the in-memory
    state is left alone; the next mutation writes a fresh full snapshot.
    """

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[str | None] | None = None
        self._runner: asyncio.Task[None] | None = None
        self._closed = False

        self.written = 0
        self.failed = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def running(self) -> bool:
        return self._runner is not None and not self._runner.done() and not self._closed

    def start(self) -> None:
        if self._runner is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._runner = self._loop.create_task(self._run(), name="snapshot-writer")
        logger.debug("SnapshotWriter started key=%s", self._key)

    def submit(self, tasks: Sequence[Task]) -> None:
        if self._loop is None or self._queue is None or self._closed:
            logger.warning("SnapshotWriter not running; dropping snapshot of %d tasks.", len(tasks))
            return

        try:
            payload = encode_snapshot(tasks)
        except (TypeError, ValueError):
            logger.exception("Failed to encode task snapshot; not persisted.")
            return

        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, payload)
        except RuntimeError:
            # Loop already closed (process shutting down).
            logger.warning("Event loop closed; dropping snapshot of %d tasks.", len(tasks))

    async def flush(self) -> None:
        if self._queue is None:
            return
        # Let submissions scheduled via call_soon_threadsafe land in the queue first.
        await asyncio.sleep(0)
        await self._queue.join()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._loop is None or self._queue is None or self._runner is None:
            return
        self._loop.call_soon_threadsafe(self._queue.put_nowait, None)
        await self._runner
        logger.debug("SnapshotWriter stopped written=%d failed=%d", self.written, self.failed)

    async def _run(self) -> None:
        assert self._queue is not None
        while True:
            payload = await self._queue.get()
            try:
                if payload is None:
                    return
                await self._write(payload)
            finally:
                self._queue.task_done()

    async def _write(self, payload: str) -> None:
        try:
            await asyncio.to_thread(self._storage.set_item, self._key, payload)
        except Exception:
            self.failed += 1
            logger.exception("Failed to persist task snapshot key=%s", self._key)
            return
        self.written += 1
