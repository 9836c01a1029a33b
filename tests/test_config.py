# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from pocket_tasks.config import Settings

_VARS = [
    "POCKET_APP_NAME",
    "POCKET_LOG_LEVEL",
    "POCKET_DATA_DIR",
    "POCKET_STORAGE_BACKEND",
    "POCKET_STORAGE_KEY",
    "POCKET_JSON_STORE_DIR",
    "POCKET_SQLITE_DB_PATH",
    "POCKET_DEFAULT_CATEGORY",
    "POCKET_CONSOLE_ENABLED",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = Settings.from_env()
    assert s.app_name == "pocket-tasks"
    assert s.storage_backend == "json"
    assert s.storage_key == "tasks"
    assert s.data_dir == Path(".local/pocket")
    assert s.json_store_dir == Path(".local/pocket/storage")
    assert s.sqlite_db_path == Path(".local/pocket/storage.sqlite3")
    assert s.default_category == "Work"
    assert s.console_enabled is True


def test_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("POCKET_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("POCKET_STORAGE_BACKEND", "SQLite")
    monkeypatch.setenv("POCKET_STORAGE_KEY", "my-tasks")
    monkeypatch.setenv("POCKET_CONSOLE_ENABLED", "no")

    s = Settings.from_env()
    assert s.storage_backend == "sqlite"
    assert s.storage_key == "my-tasks"
    assert s.sqlite_db_path == tmp_path / "storage.sqlite3"
    assert s.console_enabled is False


def test_unknown_backend_falls_back_to_json(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POCKET_STORAGE_BACKEND", "redis")
    assert Settings.from_env().storage_backend == "json"
