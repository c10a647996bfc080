"""
Structured JSON logging for the ledger.

Every record is one JSON object per line.  Posting code tags its records
with the fields in LogContext (the event being posted, the business
reference, the journal entry written) so a single order or bill can be
followed from publication to the entries it produced:

    with LogContext.bind(event_type="order.created", reference_id="ORD-1"):
        logger.info("event_posted", extra={"entry_count": 2})
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

LEDGER_LOGGER = "ledger_kernel"

_CONTEXT_FIELDS = ("correlation_id", "event_type", "reference_id", "entry_id")
_context: ContextVar[dict[str, str]] = ContextVar("ledger_log_context", default={})


class LogContext:
    """Per-task log fields, merged into every record the formatter writes."""

    @staticmethod
    def set(
        *,
        correlation_id: str | None = None,
        event_type: str | None = None,
        reference_id: str | None = None,
        entry_id: str | None = None,
    ) -> None:
        """Set context fields. None leaves the current value in place."""
        updates = {
            "correlation_id": correlation_id,
            "event_type": event_type,
            "reference_id": reference_id,
            "entry_id": entry_id,
        }
        _context.set(_merged(updates))

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set({})

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a block, then restore the old values."""
        unknown = set(fields) - set(_CONTEXT_FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context fields: {sorted(unknown)}")
        token = _context.set(_merged(fields))
        try:
            yield LogContext
        finally:
            _context.reset(token)


def _merged(updates: dict[str, str | None]) -> dict[str, str]:
    current = dict(_context.get())
    current.update({k: v for k, v in updates.items() if v is not None})
    return current


# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # LedgerError subclasses keep their context as public attributes
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Render a record, its context and its ``extra`` fields as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


def get_logger(name: str) -> logging.Logger:
    """Logger named ``ledger_kernel.<name>``."""
    if name.startswith(f"{LEDGER_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LEDGER_LOGGER}.{name}")


_configure_lock = threading.Lock()
_configured = False


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach one JSON handler to the ledger logger tree. Later calls are no-ops."""
    global _configured
    with _configure_lock:
        if _configured:
            return
        _configured = True

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())

    ledger_logger = logging.getLogger(LEDGER_LOGGER)
    ledger_logger.setLevel(level)
    ledger_logger.propagate = False
    ledger_logger.addHandler(handler)


def reset_logging() -> None:
    """Drop the configured handler so tests can configure again."""
    global _configured
    with _configure_lock:
        _configured = False
    ledger_logger = logging.getLogger(LEDGER_LOGGER)
    ledger_logger.handlers.clear()
    ledger_logger.setLevel(logging.WARNING)
