from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict

from focus_flow.config import Settings

LOG_FILE_NAME = "focus_flow.jsonl"
MAX_LOG_BYTES = 10_000_000
LOG_BACKUPS = 10

# LogRecord's own attributes; everything else on a record came in via `extra`
_RESERVED = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}

# third-party loggers and the level they are held at
_QUIETED = {
    "uvicorn.access": logging.CRITICAL,  # the access-log middleware covers requests
    "httpx": logging.WARNING,
}


def _utc_stamp(created: float) -> str:
    return datetime.fromtimestamp(created, timezone.utc).isoformat().replace("+00:00", "Z")


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, msg, then any `extra` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _utc_stamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update((k, v) for k, v in vars(record).items() if k not in _RESERVED)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _attach(root: logging.Logger, handler: logging.Handler, level: str) -> None:
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)


def setup_logging(settings: Settings) -> Path:
    """Send the root logger to stderr and to a rotating JSONL file under `settings.log_dir`.

    Returns the log file path.
    """
    level = settings.log_level
    log_path = Path(settings.log_dir) / LOG_FILE_NAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()  # reloads would otherwise stack handlers

    _attach(root, logging.StreamHandler(), level)
    _attach(
        root,
        RotatingFileHandler(log_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"),
        level,
    )

    logging.getLogger("uvicorn.error").setLevel(level)
    for name, quiet_level in _QUIETED.items():
        logging.getLogger(name).setLevel(quiet_level)
    return log_path
