"""Structured JSON logging for the ``wikidot_amc`` logger tree.

Records carry the current trace/span ids, and any ``extra`` field that could hold a
credential (password, session cookie, token) is redacted before it is serialized.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import sys
from typing import IO, Any

import orjson

from wikidot_amc.observability.context import current_trace


PACKAGE_LOGGER = "wikidot_amc"

REDACTED = "[REDACTED]"

# Matched case-insensitively against ``extra`` keys
SENSITIVE_FIELDS = frozenset({"password", "login", "wikidot_session_id", "wikidot_token7", "cookie", "authorization"})

# Attributes every LogRecord has; anything else on a record came in through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, correlated with the active span."""

    MAX_MESSAGE_LEN = 2000
    MAX_FIELD_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        ids = current_trace()
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "component": record.name.rpartition(".")[2],
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
            "trace_id": ids.trace_id,
            "span_id": ids.span_id,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            if key.lower() in SENSITIVE_FIELDS:
                entry[key] = REDACTED
            elif isinstance(value, str):
                entry[key] = _clip(value, self.MAX_FIELD_LEN)
            else:
                entry[key] = value

        return orjson.dumps(entry, default=_to_json).decode("utf-8")


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _to_json(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    if isinstance(value, BaseException):
        return f"{type(value).__name__}: {value}"
    # httpx.URL, pydantic models and anything else without a JSON form
    return str(value)


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    stream: IO[str] | None = None,
    logger_levels: dict[str, str] | None = None,
) -> logging.Logger:
    """Attach a single handler to the ``wikidot_amc`` logger and return that logger.

    The root logger is left alone; records stop at the package logger.

    Args:
        level: Package log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Emit JSON when True, a plain one-line format otherwise
        stream: Destination (defaults to stdout)
        logger_levels: Per-logger overrides, e.g. ``{"httpx": "WARNING"}``
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.getLevelName(level.upper()))
    package_logger.propagate = False
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        JsonFormatter() if json_output else logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
    )
    package_logger.addHandler(handler)

    # httpx logs every request at INFO
    levels = {"httpx": "WARNING", "httpcore": "WARNING", **(logger_levels or {})}
    for name, name_level in levels.items():
        logging.getLogger(name).setLevel(logging.getLevelName(name_level.upper()))
    return package_logger
