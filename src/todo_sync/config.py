# src/todo_sync/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time (the remote endpoint has a public default).
- Every path lives under a local, gitignored data directory by default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TODO"

DEFAULT_REMOTE_URL = "https://dummyjson.com/todos"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Local .env (gitignored) never overrides variables already set in the process.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path
    log_dir: Path

    # ---- Remote task source ----
    remote_enabled: bool
    remote_url: str
    remote_connect_timeout_seconds: float
    remote_read_timeout_seconds: float

    # ---- Reconciler policy ----
    default_owner_id: int
    reimport_when_empty: bool

    # ---- Connector flags ----
    console_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "todo") or "todo"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todo"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        remote_enabled = _env_bool(_k("REMOTE_ENABLED"), True)
        remote_url = (_env(_k("REMOTE_URL"), DEFAULT_REMOTE_URL) or DEFAULT_REMOTE_URL).strip()

        connect_timeout = _env_float(_k("REMOTE_CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout = _env_float(_k("REMOTE_READ_TIMEOUT_SECONDS"), 15.0)

        default_owner_id = _env_int(_k("DEFAULT_OWNER_ID"), 1)
        reimport_when_empty = _env_bool(_k("REIMPORT_WHEN_EMPTY"), True)

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            log_dir=log_dir,
            remote_enabled=remote_enabled,
            remote_url=remote_url,
            remote_connect_timeout_seconds=max(0.1, connect_timeout),
            remote_read_timeout_seconds=max(0.1, read_timeout),
            default_owner_id=default_owner_id,
            reimport_when_empty=reimport_when_empty,
            console_enabled=console_enabled,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
