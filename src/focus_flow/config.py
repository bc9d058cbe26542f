"""Settings loaded from FOCUS_FLOW_* environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "FOCUS_FLOW"
BACKENDS = ("local", "remote")

logger = logging.getLogger("focus_flow.system")


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(_k(name))
    return default if v is None or v.strip() == "" else v.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(_k(name))
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(_k(name))
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    backend: str = "local"

    # local backend
    db_path: Path = Path("./data/focus_flow.db")
    storage_key: str = "tasks"

    # logging
    log_level: str = "INFO"
    log_dir: Path = Path("./logs")

    # remote backend
    record_store_url: Optional[str] = None
    record_store_project_id: str = ""
    record_store_public_key: str = ""
    record_store_table: str = "task_c"
    record_store_timeout: float = 10.0
    fetch_limit: int = 100


def get_settings() -> Settings:
    backend = _env("BACKEND", "local").lower()
    if backend not in BACKENDS:
        logger.warning(
            "config.backend_unknown",
            extra={"category": "system", "event": "config.backend_unknown", "backend": backend},
        )
        backend = "local"

    return Settings(
        backend=backend,
        db_path=Path(_env("DB_PATH", "./data/focus_flow.db")).expanduser(),
        storage_key=_env("STORAGE_KEY", "tasks"),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
        log_dir=Path(_env("LOG_DIR", "./logs")).expanduser(),
        record_store_url=_env("RECORD_STORE_URL") or None,
        record_store_project_id=_env("RECORD_STORE_PROJECT_ID"),
        record_store_public_key=_env("RECORD_STORE_PUBLIC_KEY"),
        record_store_table=_env("RECORD_STORE_TABLE", "task_c"),
        record_store_timeout=_env_float("RECORD_STORE_TIMEOUT", 10.0),
        fetch_limit=_env_int("FETCH_LIMIT", 100),
    )
