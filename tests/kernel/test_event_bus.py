"""Tests for the synchronous EventBus and its failure isolation."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.events import ExpenseAdded, InvoicePaid
from ledger_kernel.services.event_bus import EventBus


def _event() -> ExpenseAdded:
    return ExpenseAdded(
        expense_id="e-1",
        expense_date=date(2024, 1, 5),
        category="Rent",
        amount=Decimal("100.00"),
        description="Rent",
    )


class TestSubscriptions:
    def test_handlers_run_in_subscription_order(self):
        bus = EventBus()
        calls = []
        bus.subscribe(ExpenseAdded, lambda e: calls.append("first"))
        bus.subscribe(ExpenseAdded.event_type, lambda e: calls.append("second"))

        result = bus.publish(_event())

        assert calls == ["first", "second"]
        assert result.handled == 2
        assert result.ok

    def test_only_matching_event_type_is_dispatched(self):
        bus = EventBus()
        seen = []
        bus.subscribe(InvoicePaid, seen.append)

        result = bus.publish(_event())

        assert seen == []
        assert result.handled == 0

    def test_unsubscribe(self):
        bus = EventBus()
        seen = []
        bus.subscribe(ExpenseAdded, seen.append)
        bus.unsubscribe(ExpenseAdded, seen.append)

        bus.publish(_event())

        assert seen == []
        assert bus.subscribers(ExpenseAdded.event_type) == []


class TestFailureIsolation:
    def test_failing_handler_does_not_stop_others(self, captured_logs):
        bus = EventBus()
        seen = []

        def broken(event):
            raise RuntimeError("ledger unavailable")

        bus.subscribe(ExpenseAdded, broken)
        bus.subscribe(ExpenseAdded, seen.append)

        result = bus.publish(_event())

        assert len(seen) == 1
        assert result.handled == 1
        assert not result.ok
        assert result.failures[0].error_type == "RuntimeError"
        assert result.failures[0].message == "ledger unavailable"

        failed = [r for r in captured_logs() if r["message"] == "event_handler_failed"]
        assert len(failed) == 1
        assert failed[0]["event_type"] == ExpenseAdded.event_type

    @pytest.mark.parametrize("exc_type", [ValueError, KeyError, ArithmeticError])
    def test_publish_never_raises(self, exc_type):
        bus = EventBus()

        def broken(event):
            raise exc_type("boom")

        bus.subscribe(ExpenseAdded, broken)
        assert bus.publish(_event()).failures
