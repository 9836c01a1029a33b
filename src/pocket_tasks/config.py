# src/pocket_tasks/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing is read from disk except the optional .env file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "POCKET"

STORAGE_BACKENDS = ("json", "sqlite")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    return value if value in choices else default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Storage ----
    storage_backend: str
    storage_key: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    json_store_dir: Path
    sqlite_db_path: Path

    # ---- Task defaults ----
    default_category: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "pocket-tasks").strip() or "pocket-tasks"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        storage_backend = _env_choice(_k("STORAGE_BACKEND"), "json", STORAGE_BACKENDS)
        storage_key = _env(_k("STORAGE_KEY"), "tasks").strip() or "tasks"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/pocket"))
        json_store_dir = _env_path(_k("JSON_STORE_DIR"), data_dir / "storage")
        sqlite_db_path = _env_path(_k("SQLITE_DB_PATH"), data_dir / "storage.sqlite3")

        default_category = _env(_k("DEFAULT_CATEGORY"), "Work").strip() or "Work"

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            storage_backend=storage_backend,
            storage_key=storage_key,
            data_dir=data_dir,
            json_store_dir=json_store_dir,
            sqlite_db_path=sqlite_db_path,
            default_category=default_category,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
