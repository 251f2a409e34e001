from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import IO, Any, Dict

__all__ = ["JsonFormatter", "configure_json_logging"]

_LOG_DIR_ENV = "KVCACHE_LOG_ROOT"
_NUM_BACKUPS = 7


# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "taskName",
}
# Context the cache attaches to its records, lifted to the top level.
_CONTEXT_FIELDS = ("table", "pointer", "failures", "interval_seconds")


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``table``/``pointer``/``failures`` sit next
    to the message, any other ``extra`` keys are nested under ``extra``."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "service": self._service_name,
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _CONTEXT_FIELDS:
            if field in record.__dict__:
                payload[field] = record.__dict__[field]
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and key not in _CONTEXT_FIELDS
        }
        if extras:
            payload["extra"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_json_logging(
    service_name: str,
    *,
    level: int | str = logging.INFO,
    stream: IO[str] | None = None,
    log_dir: str | Path | None = None,
) -> None:
    """Install JSON logging on the root logger.

    ``LOG_LEVEL`` overrides ``level``. Records always go to ``stream``
    (stderr by default); a midnight-rotating file ``<service_name>.log`` is
    added when ``log_dir`` or ``KVCACHE_LOG_ROOT`` names a directory.
    """

    name_to_level = logging.getLevelNamesMapping()
    env_level = os.getenv("LOG_LEVEL")
    if env_level:
        candidate = name_to_level.get(env_level.upper())
        if isinstance(candidate, int):
            level = candidate
    elif isinstance(level, str):
        level = name_to_level.get(level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = JsonFormatter(service_name)

    stream_handler = logging.StreamHandler(stream)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    directory = log_dir or os.getenv(_LOG_DIR_ENV)
    if not directory:
        return
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    file_handler = TimedRotatingFileHandler(
        path / f"{service_name}.log",
        when="midnight",
        backupCount=_NUM_BACKUPS,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)
