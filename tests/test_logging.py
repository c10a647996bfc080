"""
Tests for structured logging (ledger_kernel/logging_config.py).

Validates:
- One JSON object per record with ts/level/logger/message
- ``extra`` fields and LogContext fields are merged into the payload
- Ledger exceptions contribute their code and attributes
- configure_logging() is idempotent; reset_logging() undoes it
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from ledger_kernel.exceptions import PeriodLockedError, UnbalancedEntryError
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture
def stream():
    """Fresh logging setup writing JSON lines into a StringIO."""
    reset_logging()
    LogContext.clear()
    buffer = StringIO()
    configure_logging(stream=buffer)
    yield buffer
    LogContext.clear()
    reset_logging()


def _records(buffer: StringIO) -> list[dict]:
    return [json.loads(line) for line in buffer.getvalue().splitlines() if line]


def _ledger_handlers() -> list[logging.Handler]:
    """Handlers installed by configure_logging, ignoring any the test runner adds."""
    return [
        h
        for h in logging.getLogger("ledger_kernel").handlers
        if isinstance(h.formatter, StructuredFormatter)
    ]


class TestPayload:
    def test_core_fields(self, stream):
        get_logger("journal_writer").info("journal_entry_posted")

        (record,) = _records(stream)
        assert record["message"] == "journal_entry_posted"
        assert record["level"] == "INFO"
        assert record["logger"] == "ledger_kernel.journal_writer"
        assert record["ts"].endswith("+00:00")

    def test_extra_values_are_json_safe(self, stream):
        entry_id = uuid4()
        get_logger("test").info(
            "posted",
            extra={
                "seq": 7,
                "total_amount": Decimal("1230.00"),
                "effective_date": date(2024, 1, 12),
                "journal_entry": entry_id,
            },
        )

        (record,) = _records(stream)
        assert record["seq"] == 7
        assert record["total_amount"] == "1230.00"
        assert record["effective_date"] == "2024-01-12"
        assert record["journal_entry"] == str(entry_id)

    def test_debug_suppressed_at_default_level(self, stream):
        logger = get_logger("test")
        logger.debug("hidden")
        logger.warning("shown")

        assert [r["message"] for r in _records(stream)] == ["shown"]

    def test_prefixed_name_not_doubled(self):
        assert get_logger("ledger_kernel.db").name == "ledger_kernel.db"


class TestExceptionFields:
    def test_period_locked(self, stream):
        try:
            raise PeriodLockedError(date(2024, 1, 31), date(2024, 3, 31))
        except PeriodLockedError:
            get_logger("test").error("posting_rejected", exc_info=True)

        (record,) = _records(stream)
        assert record["exc_type"] == "PeriodLockedError"
        assert record["exc_code"] == "PERIOD_LOCKED"
        assert record["exc_posting_date"] == "2024-01-31"
        assert record["exc_lock_date"] == "2024-03-31"
        assert "Traceback" in record["traceback"]

    def test_unbalanced_totals(self, stream):
        try:
            raise UnbalancedEntryError(Decimal("100.00"), Decimal("90.00"), Decimal("0.05"))
        except UnbalancedEntryError:
            get_logger("test").error("posting_rejected", exc_info=True)

        (record,) = _records(stream)
        assert record["exc_code"] == "UNBALANCED_ENTRY"
        assert record["exc_debits"] == "100.00"
        assert record["exc_credits"] == "90.00"


class TestLogContext:
    def test_fields_appear_on_records(self, stream):
        LogContext.set(correlation_id="run-1", event_type="order.created")
        get_logger("test").info("handled")

        (record,) = _records(stream)
        assert record["correlation_id"] == "run-1"
        assert record["event_type"] == "order.created"

    def test_set_ignores_none(self):
        LogContext.set(reference_id="ORD-1")
        LogContext.set(entry_id="e-1")
        assert LogContext.get_all() == {"reference_id": "ORD-1", "entry_id": "e-1"}

    def test_bind_nests_and_restores(self):
        LogContext.set(entry_id="outer")
        with LogContext.bind(entry_id="inner", event_type="bill.paid"):
            assert LogContext.get_all() == {"entry_id": "inner", "event_type": "bill.paid"}
        assert LogContext.get_all() == {"entry_id": "outer"}

    def test_bind_rejects_unknown_field(self):
        with pytest.raises(TypeError):
            with LogContext.bind(account_code="1000"):
                pass

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}


class TestConfigureLogging:
    def test_second_call_is_ignored(self, stream):
        configure_logging(stream=StringIO(), level=logging.DEBUG)

        assert len(_ledger_handlers()) == 1
        assert logging.getLogger("ledger_kernel").level == logging.INFO

    def test_reset_removes_handler(self, stream):
        reset_logging()

        assert _ledger_handlers() == []
        assert logging.getLogger("ledger_kernel").level == logging.WARNING

    def test_custom_handler_gets_formatter(self):
        reset_logging()
        handler = logging.StreamHandler(StringIO())
        configure_logging(handler=handler)
        try:
            assert isinstance(handler.formatter, StructuredFormatter)
        finally:
            reset_logging()
