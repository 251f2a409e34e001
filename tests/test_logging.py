from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from kvcache.common import JsonFormatter, configure_json_logging


@pytest.fixture(autouse=True)
def _restore_root_logger(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("KVCACHE_LOG_ROOT", raising=False)
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, JsonFormatter):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_configure_json_logging_emits_json() -> None:
    stream = io.StringIO()
    configure_json_logging("kvcache_test", stream=stream)
    logger = logging.getLogger("kvcache.test")
    logger.info("hello", extra={"table": "sessions", "removed": 3})

    line = stream.getvalue().strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["service"] == "kvcache_test"
    assert payload["level"] == "info"
    assert payload["message"] == "hello"
    assert payload["logger"] == "kvcache.test"
    assert payload["table"] == "sessions"
    assert payload["extra"] == {"removed": 3}


def test_cache_context_fields_sit_at_top_level() -> None:
    stream = io.StringIO()
    configure_json_logging("kvcache_test", stream=stream)
    logging.getLogger("kvcache.ttl").info(
        "Initialised prune pointer", extra={"table": "sessions", "pointer": 41}
    )

    payload = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert payload["table"] == "sessions"
    assert payload["pointer"] == 41
    assert "extra" not in payload


def test_exceptions_are_serialised() -> None:
    stream = io.StringIO()
    configure_json_logging("kvcache_test", stream=stream)
    try:
        raise ConnectionError("store unavailable")
    except ConnectionError:
        logging.getLogger("kvcache.ttl").exception("Prune sweep failed")

    payload = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert payload["level"] == "error"
    assert "ConnectionError: store unavailable" in payload["exception"]


def test_file_handler_only_when_log_dir_configured(tmp_path: Path) -> None:
    stream = io.StringIO()
    configure_json_logging("kvcache_test", stream=stream)
    assert not list(tmp_path.iterdir())

    configure_json_logging("kvcache_test", stream=stream, log_dir=tmp_path)
    logging.getLogger("kvcache.test").warning("to disk")

    log_file = tmp_path / "kvcache_test.log"
    assert log_file.exists()
    first_entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[0])
    assert first_entry["message"] == "to disk"


def test_log_level_env_overrides_argument(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "warning")
    stream = io.StringIO()
    configure_json_logging("kvcache_test", level="DEBUG", stream=stream)

    logging.getLogger("kvcache.test").info("dropped")
    assert stream.getvalue() == ""
    assert logging.getLogger().level == logging.WARNING
