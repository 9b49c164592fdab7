"""Logging setup for the admin dashboard.

Console output is human readable and tagged with the collection and
operation a record was logged for. ERROR records are also appended as JSON
lines under ``LOGS_DIR/errors``, with credentials and session cookies
scrubbed before they reach disk.
"""

import json
import logging
import os
import re
import sys
import traceback
from datetime import UTC, datetime
from functools import lru_cache
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any

from vip_admin.core.settings import get_settings

REDACTED = "<redacted>"

_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

# Keys given their own slot in the error payload rather than context_data
_PAYLOAD_ATTRS = ("collection", "operation", "record_id", "context_data", "error_type", "error_message")

_SENSITIVE_KEY_PARTS = (
    "authorization",
    "cookie",
    "api_key",
    "api-key",
    "apikey",
    "token",
    "password",
    "secret",
    "session",
)

_STRING_SCRUBBERS = (
    (re.compile(r"(?i)\bbearer\s+[a-z0-9\-._~+/]+=*"), "Bearer " + REDACTED),
    # Identity Toolkit puts the API key in the query string
    (re.compile(r"(?i)([?&]key=)[^&\s]+"), r"\1" + REDACTED),
    (re.compile(r"(?i)(password['\"]?\s*[:=]\s*['\"])([^'\"]+)(['\"])"), r"\1" + REDACTED + r"\3"),
)


def _sanitize_filename(value: str) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9._-]+", "_", value.strip().lower())
    return cleaned.strip("._-") or "vip_admin"


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return lowered == "key" or any(part in lowered for part in _SENSITIVE_KEY_PARTS)


def _redact_value(value: Any) -> Any:
    """Recursively scrub credentials from dicts, sequences and strings."""
    if isinstance(value, dict):
        return {
            str(k): REDACTED if _is_sensitive(str(k)) else _redact_value(v) for k, v in value.items()
        }
    if isinstance(value, list):
        return [_redact_value(v) for v in value]
    if isinstance(value, tuple):
        return tuple(_redact_value(v) for v in value)
    if isinstance(value, str):
        for pattern, replacement in _STRING_SCRUBBERS:
            value = pattern.sub(replacement, value)
    return value


def _context_of(record: logging.LogRecord) -> dict[str, Any] | None:
    """``context_data`` merged with any ad-hoc ``extra=`` keys."""
    extras = {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and key not in _PAYLOAD_ATTRS
    }
    context = getattr(record, "context_data", None)
    if extras:
        context = {**extras, **(context or {})}
    return _redact_value(context) if context is not None else None


def _build_error_json_payload(record: logging.LogRecord) -> dict[str, Any]:
    message = _redact_value(record.getMessage())
    exc_type, exc_value, exc_tb = record.exc_info if record.exc_info else (None, None, None)

    stack_trace = None
    if exc_type and exc_value and exc_tb:
        stack_trace = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))

    payload: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "level": record.levelname,
        "logger": record.name,
        "collection": getattr(record, "collection", None),
        "operation": getattr(record, "operation", None),
        "record_id": getattr(record, "record_id", None),
        "error_type": getattr(record, "error_type", None)
        or (exc_type.__name__ if exc_type else "LogError"),
        "error_message": _redact_value(
            getattr(record, "error_message", None) or (str(exc_value) if exc_value else message)
        ),
        "stack_trace": stack_trace,
        "message": message,
        "context_data": _context_of(record),
        "source_file": record.filename,
        "source_line": record.lineno,
        "source_function": record.funcName,
        "process": record.process,
    }
    return {k: v for k, v in payload.items() if v is not None}


class _ConsoleFormatter(logging.Formatter):
    """Plain console lines, suffixed with ``[collection/operation]`` when known."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        tags = [getattr(record, key, None) for key in ("collection", "operation")]
        tags = [str(tag) for tag in tags if tag]
        return f"{line} [{'/'.join(tags)}]" if tags else line


class _ErrorJsonlHandler(TimedRotatingFileHandler):
    """Daily-rotated JSONL file of ERROR records, one per process."""

    def __init__(self, errors_dir: Path, logger_name: str):
        errors_dir.mkdir(parents=True, exist_ok=True)
        filename = errors_dir / f"{_sanitize_filename(logger_name)}_errors_{os.getpid()}.jsonl"
        super().__init__(str(filename), when="D", backupCount=0, encoding="utf-8", delay=True, utc=True)
        self.setLevel(logging.ERROR)
        self.suffix = "%Y%m%d"
        # app_errors_1.jsonl.20260101 -> app_errors_1_20260101.jsonl
        self.namer = lambda name: re.sub(r"\.jsonl\.(.+)$", r"_\1.jsonl", name)

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(_build_error_json_payload(record), ensure_ascii=False, default=str)


@lru_cache
def setup_logging(name: str | None = None, level: str | None = None) -> logging.Logger:
    """
    Configure the root logger once and return the dashboard logger.

    Args:
        name: Logger name (defaults to the app name from settings)
        level: Log level (defaults to settings.log_level)
    """
    settings = get_settings()
    logger_name = name or settings.app_name
    log_level = getattr(logging, (level or settings.log_level).upper())

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(
        _ConsoleFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)
    root.addHandler(console)
    root.addHandler(_ErrorJsonlHandler(settings.logs_dir / "errors", logger_name))

    app_logger = logging.getLogger(logger_name)
    app_logger.setLevel(log_level)
    return app_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
