"""
Tests for the Accounts Receivable module.

Validates:
- Invoice creation and upsert
- Payments: partial then paid, clamping, cash vs bank
- The payment reminder sweep skips invoices with no resolvable customer
"""

from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from ledger_kernel.exceptions import InvalidPaymentError, RecordNotFoundError
from ledger_kernel.models.journal import ReferenceType
from ledger_modules.ar.models import CustomerContact, InvoiceStatus

INVOICE_DATE = date(2024, 1, 2)
DUE_DATE = date(2024, 2, 1)


@pytest.fixture
def receivables(orchestrator):
    return orchestrator.receivables


@pytest.fixture
def invoice(receivables):
    return receivables.create_invoice(
        "INV-001", Decimal("1230"), INVOICE_DATE, DUE_DATE, customer_name="Asha"
    )


class DictDirectory:
    """Customer directory keyed by invoice number."""

    def __init__(self, customers: dict[str, CustomerContact]):
        self._customers = customers

    def find_customer_for_invoice(self, invoice):
        return self._customers.get(invoice.number)


class RecordingSender:
    def __init__(self):
        self.sent = []

    def send_payment_reminder(self, invoice, customer):
        self.sent.append((invoice.number, customer.email))


class TestInvoices:
    def test_create_invoice_is_open(self, invoice, orchestrator):
        assert invoice.status == InvoiceStatus.OPEN
        assert invoice.balance_due == Decimal("1230.00")
        assert invoice.is_outstanding
        # Revenue is recognised by the order, not the invoice
        assert orchestrator.journal_selector.count() == 0

    def test_save_invoice_updates_existing(self, receivables, invoice):
        receivables.save_invoice(replace(invoice, customer_name="Asha Rao"))

        assert receivables.get_invoice(invoice.id).customer_name == "Asha Rao"
        assert len(receivables.list_invoices()) == 1

    def test_save_invoice_inserts_new(self, receivables, invoice):
        new = replace(invoice, id=uuid4(), number="INV-002")
        receivables.save_invoice(new)
        assert [i.number for i in receivables.list_invoices()] == ["INV-001", "INV-002"]

    def test_unknown_invoice(self, receivables):
        with pytest.raises(RecordNotFoundError):
            receivables.get_invoice(uuid4())


class TestInvoicePayments:
    def test_partial_then_paid(self, orchestrator, receivables, invoice):
        partial = receivables.record_invoice_payment(invoice.id, Decimal("1000"))
        assert partial.status == InvoiceStatus.PARTIAL
        assert partial.balance_due == Decimal("230.00")

        paid = receivables.record_invoice_payment(invoice.id, Decimal("230"))
        assert paid.status == InvoiceStatus.PAID
        assert not paid.is_outstanding
        assert orchestrator.ledger_selector.balance_of(1010) == Decimal("1230.00")

    def test_payment_entry(self, orchestrator, receivables, invoice, deterministic_clock):
        receivables.record_invoice_payment(invoice.id, Decimal("500"))

        entry = orchestrator.journal_selector.entries_for_reference("INV-001")[0]
        assert entry.description == "Payment for Inv #INV-001"
        assert entry.reference_type == ReferenceType.PAYMENT
        assert entry.effective_date == deterministic_clock.today()
        assert entry.lines_for(1010)[0].debit == Decimal("500.00")
        assert entry.lines_for(1200)[0].credit == Decimal("500.00")

    def test_cash_payment_debits_cash(self, orchestrator, receivables, invoice):
        receivables.record_invoice_payment(invoice.id, Decimal("30"), method="cash")
        assert orchestrator.ledger_selector.balance_of(1000) == Decimal("30.00")

    def test_overpayment_is_clamped(self, orchestrator, receivables, invoice):
        paid = receivables.record_invoice_payment(invoice.id, Decimal("5000"))

        assert paid.status == InvoiceStatus.PAID
        assert paid.payments[0].amount == Decimal("1230.00")
        assert orchestrator.ledger_selector.balance_of(1010) == Decimal("1230.00")

    def test_payment_on_paid_invoice_rejected(self, receivables, invoice):
        receivables.record_invoice_payment(invoice.id, Decimal("1230"))
        with pytest.raises(InvalidPaymentError):
            receivables.record_invoice_payment(invoice.id, Decimal("1"))

    def test_non_positive_payment_rejected(self, receivables, invoice):
        with pytest.raises(InvalidPaymentError):
            receivables.record_invoice_payment(invoice.id, Decimal("-5"))

    def test_order_then_payment_clears_receivable(self, orchestrator, receivables, invoice):
        orchestrator.sales.record_order(
            "ORD-1",
            INVOICE_DATE,
            subtotal=Decimal("1000"),
            total=Decimal("1230"),
            tax_amount=Decimal("180"),
            shipping_cost=Decimal("50"),
        )
        receivables.record_invoice_payment(invoice.id, Decimal("1230"))
        assert orchestrator.ledger_selector.balance_of(1200) == Decimal("0.00")


class TestPaymentReminders:
    def test_reminders_skip_unresolved_customers(
        self, receivables, invoice, session, captured_logs, deterministic_clock
    ):
        receivables.create_invoice("INV-002", Decimal("50"), INVOICE_DATE, DUE_DATE)
        paid = receivables.create_invoice("INV-003", Decimal("10"), INVOICE_DATE, DUE_DATE)
        receivables.record_invoice_payment(paid.id, Decimal("10"))
        directory = DictDirectory(
            {
                "INV-001": CustomerContact("c1", "Asha", "asha@example.com"),
                "INV-003": CustomerContact("c3", "Ravi", "ravi@example.com"),
            }
        )
        sender = RecordingSender()

        sent = receivables.send_batch_payment_reminders(directory, sender)

        assert sent == 1
        assert sender.sent == [("INV-001", "asha@example.com")]
        session.expire_all()
        stamped = receivables.get_invoice(invoice.id).last_payment_reminder
        assert stamped == deterministic_clock.now()
        assert stamped < datetime.now(timezone.utc)
        skipped = [r for r in captured_logs() if r["message"] == "payment_reminder_skipped"]
        assert [r["invoice_number"] for r in skipped] == ["INV-002"]

    def test_no_outstanding_invoices(self, receivables):
        assert receivables.send_batch_payment_reminders(DictDirectory({}), RecordingSender()) == 0
