# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Structured logging configuration for trustledger.

Provides:
- JSON formatter for log files and non-interactive runs
- Plain text formatter for terminals
- Correlation IDs so every item of a batch import shares one trace id
- Ledger event logging with truncated free-text fields
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Get the current correlation ID, or None outside a correlation context."""
    return _correlation_id.get()


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Generator[str, None, None]:
    """Scope a correlation ID (a fresh uuid4 unless one is given).

    Example:
        with correlation_context() as cid:
            for request in requests:
                ...  # every log line carries cid
    """
    cid = correlation_id or str(uuid.uuid4())
    token = _correlation_id.set(cid)
    try:
        yield cid
    finally:
        _correlation_id.reset(token)


class JSONFormatter(logging.Formatter):
    """One JSON object per record; ledger events keep their fields under ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        correlation_id = get_correlation_id()
        if correlation_id:
            log_data["correlation_id"] = correlation_id
        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_data["extra"] = extra_data
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """Plain text lines, prefixed with the short correlation ID inside a batch."""

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s %(levelname)-7s %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = get_correlation_id()
        if correlation_id:
            # Copy so other handlers see the original record
            record = logging.makeLogRecord(record.__dict__)
            record.msg = f"[{correlation_id[:8]}] {record.msg}"
        return super().format(record)


def _resolve_json_format(log_format: str) -> bool:
    log_format = log_format.lower()
    if log_format in ("json", "text"):
        return log_format == "json"
    return not sys.stderr.isatty()


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure root logging for the CLI or a host application.

    Unset arguments fall back to TRUSTLEDGER_LOG_LEVEL, TRUSTLEDGER_LOG_FORMAT
    (json, text or auto) and TRUSTLEDGER_LOG_FILE. The log file is always JSON.
    """
    from .config import get_settings

    settings = get_settings()
    level = settings.log_level if level is None else level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    if json_format is None:
        json_format = _resolve_json_format(settings.log_format)
    log_file = settings.log_file if log_file is None else log_file

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(JSONFormatter() if json_format else StandardFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)


class LedgerEventLogger:
    """Logger for ledger mutations.

    Emits one structured record per checkin upsert, snap grant or audit
    action. Free-text fields such as override notes are truncated so an
    oversized note cannot flood the log pipeline.
    """

    MAX_TEXT_LENGTH = 200

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("trustledger.ledger")

    def log_event(
        self,
        event: str,
        fields: dict[str, Any],
        level: int = logging.INFO,
    ) -> None:
        """Log a ledger event.

        Args:
            event: Short event name (e.g. "checkin.created")
            fields: Event attributes (long strings are truncated)
            level: Log level
        """
        cleaned = self._truncate(fields)
        self.logger.log(
            level,
            f"Ledger event: {event}",
            extra={"extra_data": {"event": event, **cleaned}},
        )

    def _truncate(self, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: self._truncate(value) for key, value in data.items()}
        if isinstance(data, list):
            return [self._truncate(item) for item in data]
        if isinstance(data, str) and len(data) > self.MAX_TEXT_LENGTH:
            return data[: self.MAX_TEXT_LENGTH] + "..."
        return data


# Default ledger event logger
ledger_logger = LedgerEventLogger()
