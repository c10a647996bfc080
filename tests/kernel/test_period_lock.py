"""
Tests for the period lock.

A date on or before the lock date is closed for every write path: direct
journal postings, adjustments and every producer module.  Rejected
operations leave both the journal and the sub-ledgers untouched.
"""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.dtos import EntrySpec, LineSpec
from ledger_kernel.exceptions import PeriodLockedError
from ledger_kernel.models.journal import ReferenceType
from ledger_kernel.services.period_guard import PeriodLockGuard
from ledger_modules.ap.models import ApprovalStatus, BillStatus
from ledger_modules.ar.models import InvoiceStatus

LOCK_DATE = date(2023, 12, 31)


@pytest.fixture
def locked(make_orchestrator):
    return make_orchestrator(lock_date=LOCK_DATE)


class TestPeriodLockGuard:
    def test_no_lock_date_never_locks(self):
        guard = PeriodLockGuard()
        assert not guard.is_locked(date(1999, 1, 1))
        guard.assert_unlocked(date(1999, 1, 1))

    def test_lock_date_itself_is_locked(self):
        guard = PeriodLockGuard(LOCK_DATE)
        assert guard.is_locked(LOCK_DATE)
        assert guard.is_locked(date(2023, 6, 30))
        assert not guard.is_locked(date(2024, 1, 1))

    def test_rejection_carries_both_dates(self, captured_logs):
        guard = PeriodLockGuard(LOCK_DATE)
        with pytest.raises(PeriodLockedError) as exc_info:
            guard.assert_unlocked(LOCK_DATE)

        assert exc_info.value.posting_date == LOCK_DATE
        assert exc_info.value.lock_date == LOCK_DATE
        assert any(r["message"] == "period_locked_rejection" for r in captured_logs())

    def test_built_from_tax_settings(self, ledger_config):
        guard = PeriodLockGuard.from_settings(ledger_config.with_lock_date(LOCK_DATE).tax)
        assert guard.lock_date == LOCK_DATE


class TestLockedWritePaths:
    def test_journal_writer_rejects_locked_date(self, locked):
        spec = EntrySpec(
            effective_date=LOCK_DATE,
            description="Late entry",
            reference_id="late",
            reference_type=ReferenceType.ADJUSTMENT,
            lines=(LineSpec.dr(1010, Decimal("10")), LineSpec.cr(3000, Decimal("10"))),
        )
        with pytest.raises(PeriodLockedError):
            locked.journal_writer.post_entry(spec)
        assert locked.journal_selector.count() == 0

    def test_adjustment_rejected(self, locked):
        with pytest.raises(PeriodLockedError):
            locked.record_adjustment(LOCK_DATE, "Late", 1010, 3000, Decimal("10"))

    def test_order_rejected(self, locked):
        with pytest.raises(PeriodLockedError):
            locked.sales.record_order(
                "ORD-LOCKED", LOCK_DATE, subtotal=Decimal("100"), total=Decimal("100")
            )
        assert locked.journal_selector.count() == 0

    def test_expense_rejected_without_record(self, locked):
        with pytest.raises(PeriodLockedError):
            locked.expenses.add_expense("Rent", Decimal("500"), "December rent", LOCK_DATE)
        assert locked.expenses.list_expenses() == []

    def test_bill_rejected_without_record(self, locked):
        vendor = locked.payables.get_vendor_by_code("v1")
        with pytest.raises(PeriodLockedError):
            locked.payables.create_bill(vendor.id, Decimal("200"), date(2023, 12, 1))
        assert locked.payables.list_bills() == []

    def test_invoice_rejected_without_record(self, locked):
        with pytest.raises(PeriodLockedError):
            locked.receivables.create_invoice(
                "INV-LOCKED", Decimal("100"), date(2023, 11, 1), date(2023, 12, 1)
            )
        assert locked.receivables.list_invoices() == []

    def test_day_after_lock_is_open(self, locked):
        locked.sales.record_order(
            "ORD-OPEN", date(2024, 1, 1), subtotal=Decimal("100"), total=Decimal("100")
        )
        assert locked.journal_selector.count() == 2


class TestLockedSubledgerFollowUps:
    """Records opened before the month was closed cannot be settled inside it."""

    MONTH_END = date(2024, 1, 31)

    @pytest.fixture
    def open_books(self, make_orchestrator):
        return make_orchestrator()

    @pytest.fixture
    def closed_books(self, open_books, make_orchestrator):
        return make_orchestrator(lock_date=self.MONTH_END)

    def test_bill_approval_rejected(self, open_books, closed_books):
        vendor = open_books.payables.get_vendor_by_code("v2")
        bill = open_books.payables.create_bill(vendor.id, Decimal("1500"), date(2024, 1, 20))

        with pytest.raises(PeriodLockedError):
            closed_books.payables.approve_bill(bill.id)

        after = closed_books.payables.get_bill(bill.id)
        assert after.status == BillStatus.PENDING_APPROVAL
        assert after.approval_status == ApprovalStatus.PENDING
        assert closed_books.payables.get_vendor(vendor.id).balance_due == Decimal("0.00")
        assert closed_books.journal_selector.count() == 0

    def test_bill_payment_rejected(self, open_books, closed_books):
        vendor = open_books.payables.get_vendor_by_code("v1")
        bill = open_books.payables.create_bill(vendor.id, Decimal("500"), date(2024, 1, 10))
        entries_before = closed_books.journal_selector.count()

        with pytest.raises(PeriodLockedError):
            closed_books.payables.pay_bill(bill.id, Decimal("500"), payment_date=self.MONTH_END)

        after = closed_books.payables.get_bill(bill.id)
        assert after.status == BillStatus.OPEN
        assert after.balance_due == Decimal("500.00")
        assert after.payments == ()
        assert closed_books.payables.get_vendor(vendor.id).balance_due == Decimal("500.00")
        assert closed_books.journal_selector.count() == entries_before

    def test_vendor_credit_rejected(self, open_books, closed_books):
        vendor = open_books.payables.get_vendor_by_code("v1")
        open_books.payables.create_bill(vendor.id, Decimal("300"), date(2024, 1, 10))
        entries_before = closed_books.journal_selector.count()

        with pytest.raises(PeriodLockedError):
            closed_books.payables.create_vendor_credit(
                vendor.id, Decimal("100"), date(2024, 1, 25), reason="Damaged crates"
            )

        assert closed_books.payables.list_vendor_credits(vendor.id) == []
        assert closed_books.payables.get_vendor(vendor.id).balance_due == Decimal("300.00")
        assert closed_books.journal_selector.count() == entries_before

    def test_invoice_payment_rejected(self, open_books, closed_books):
        invoice = open_books.receivables.create_invoice(
            "INV-JAN", Decimal("800"), date(2024, 1, 5), date(2024, 2, 5)
        )

        with pytest.raises(PeriodLockedError):
            closed_books.receivables.record_invoice_payment(
                invoice.id, Decimal("800"), payment_date=date(2024, 1, 20)
            )

        after = closed_books.receivables.get_invoice(invoice.id)
        assert after.status == InvoiceStatus.OPEN
        assert after.balance_due == Decimal("800.00")
        assert after.payments == ()
        assert closed_books.journal_selector.count() == 0

    def test_settlement_after_month_end_is_open(self, open_books, closed_books):
        invoice = open_books.receivables.create_invoice(
            "INV-JAN", Decimal("800"), date(2024, 1, 5), date(2024, 2, 5)
        )
        paid = closed_books.receivables.record_invoice_payment(
            invoice.id, Decimal("800"), payment_date=date(2024, 2, 1)
        )
        assert paid.status == InvoiceStatus.PAID
