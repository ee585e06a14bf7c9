"""Logging configuration for the headlines backend.

Two output modes:
- Human-readable (dev): timestamped, leveled lines tagged with the active
  storage backend.
- JSON (production): one object per line for hosted log drains, carrying
  ``backend`` and, for headline events, the ``country`` they concern.

Service code attaches the country with ``extra``::

    logger.info("Headline set", extra={"country": country})

Usage:
    from headlines.logging_config import setup_logging

    setup_logging()                                 # INFO, human-readable
    setup_logging(level="DEBUG", backend="redis")   # tag lines with backend
    setup_logging(json_format=True)                 # INFO, JSON lines
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

# Third-party loggers that are noisy at INFO.
_QUIET_LOGGERS: tuple[str, ...] = ("aiohttp.access", "asyncio")

# Record attributes copied into JSON output when present.
_CONTEXT_FIELDS: tuple[str, ...] = ("backend", "country")


class _BackendFilter(logging.Filter):
    """Stamp every record with the storage backend serving this process."""

    def __init__(self, backend: Optional[str]) -> None:
        super().__init__()
        self.backend = backend or "-"

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "backend"):
            record.backend = self.backend
        return True


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single JSON line.

    Fields: timestamp (ISO-8601 UTC), severity, module, message, the
    headline context (backend, country) when set, and the formatted
    traceback when the record carries one.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "severity": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }
        for name in _CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value
        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


_HUMAN_FMT = "%(asctime)s [%(levelname)s] %(name)s (%(backend)s): %(message)s"


def setup_logging(
    level: str = "INFO", json_format: bool = False, backend: Optional[str] = None
) -> None:
    """Configure the root logger with a single stderr handler.

    Idempotent: existing root handlers are replaced, so calling it again
    from an app factory in tests doesn't duplicate output.

    Args:
        level: Log level name.
        json_format: Emit JSON lines instead of human-readable text.
        backend: Storage backend name stamped on every record.

    Raises:
        ValueError: If *level* is not a recognised log level name.
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")

    root = logging.getLogger()
    root.setLevel(numeric_level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.addFilter(_BackendFilter(backend))
    handler.setFormatter(_JSONFormatter() if json_format else logging.Formatter(_HUMAN_FMT))
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))
