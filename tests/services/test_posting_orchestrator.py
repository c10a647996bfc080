"""
Integration tests for PostingOrchestrator wiring and the database layer.

A month of mixed activity across every producer module must leave a
balanced journal, a reconciled AP control account and balances that match
the hand-computed figures.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from ledger_kernel.db.engine import get_engine, session_scope
from ledger_kernel.db.store import CollectionStore
from ledger_kernel.models.account import Account
from ledger_services import PostingOrchestrator, build_posting_orchestrator


@pytest.fixture
def busy_month(orchestrator):
    o = orchestrator
    o.record_adjustment(date(2024, 1, 1), "Opening capital", 1010, 3000, Decimal("50000"))
    o.sales.record_order(
        "ORD-1",
        date(2024, 1, 3),
        subtotal=Decimal("2000"),
        total=Decimal("2410"),
        tax_amount=Decimal("360"),
        shipping_cost=Decimal("50"),
        paid_with_wallet=Decimal("410"),
    )
    invoice = o.receivables.create_invoice(
        "INV-1", Decimal("2000"), date(2024, 1, 3), date(2024, 2, 3)
    )
    o.receivables.record_invoice_payment(invoice.id, Decimal("2000"), payment_date=date(2024, 1, 9))
    vendor = o.payables.get_vendor_by_code("v2")
    bill = o.payables.create_bill(vendor.id, Decimal("1200"), date(2024, 1, 4))
    o.payables.approve_bill(bill.id)
    o.payables.pay_bill(bill.id, Decimal("1200"), payment_date=date(2024, 1, 10))
    o.expenses.add_expense("Rent", Decimal("8000"), "January rent", date(2024, 1, 5))
    return o


class TestEndToEnd:
    def test_journal_balances(self, busy_month):
        assert busy_month.reporting.trial_balance().is_balanced

    def test_balances(self, busy_month):
        balance = busy_month.ledger_selector.balance_of
        assert balance(1200) == Decimal("0.00")
        assert balance(2600) == Decimal("-410.00")
        assert balance(2500) == Decimal("360.00")
        assert balance(1010) == Decimal("42800.00")
        assert balance(2000) == Decimal("0.00")
        assert balance(5000) == Decimal("2000.00")

    def test_ap_reconciles(self, busy_month):
        assert busy_month.payables.check_control_account().is_reconciled

    def test_entries_in_sequence(self, busy_month):
        seqs = [e.seq for e in busy_month.list_entries()]
        assert seqs == list(range(1, len(seqs) + 1))

    def test_statement(self, busy_month):
        statement = busy_month.reporting.generate_statement(date(2024, 1, 1), date(2024, 1, 31))
        assert statement.revenue.total == Decimal("2050.00")
        assert statement.cogs == Decimal("2000.00")
        assert statement.net_profit == Decimal("-7950.00")


class TestWiring:
    def test_build_from_bundled_config(self, session, deterministic_clock):
        orchestrator = build_posting_orchestrator(session, clock=deterministic_clock)
        orchestrator.bootstrap()

        assert orchestrator.config.config_id == "default"
        assert orchestrator.clock is deterministic_clock
        assert len(orchestrator.list_accounts()) == len(orchestrator.config.accounts)

    def test_services_share_one_period_guard(self, orchestrator):
        guard = orchestrator.period_guard
        assert orchestrator.journal_writer._guard is guard
        assert orchestrator.sales._guard is guard
        assert orchestrator.payables._guard is guard

    def test_ready_is_logged(self, session, ledger_config, captured_logs):
        PostingOrchestrator(session, ledger_config)
        ready = [r for r in captured_logs() if r["message"] == "posting_orchestrator_ready"]
        assert ready[0]["rule_count"] == 7


class TestDatabaseLayer:
    def test_session_scope_commits(self, engine):
        with session_scope() as session:
            session.add(Account(code=1, name="Scratch", account_type="asset"))

        with session_scope() as session:
            assert CollectionStore(session, Account).get_all() != []

    def test_session_scope_rolls_back(self, engine):
        with pytest.raises(RuntimeError):
            with session_scope() as session:
                session.add(Account(code=2, name="Scratch", account_type="asset"))
                session.flush()
                raise RuntimeError("abort")

        with session_scope() as session:
            assert CollectionStore(session, Account).get_all() == []

    def test_store_add_get_delete(self, session):
        store = CollectionStore(session, Account)
        account = store.add(Account(code=7, name="Temp", account_type="equity"))

        assert store.name == "accounts"
        assert store.get(account.id) is account
        assert store.delete(account.id)
        assert store.get(account.id) is None
        assert not store.delete(account.id)

    def test_engine_is_sqlite(self, engine):
        assert get_engine().dialect.name == "sqlite"

    def test_store_update_and_upsert(self, session):
        store = CollectionStore(session, Account)
        account = store.add(Account(code=8, name="Temp", account_type="equity"))

        assert store.update(account.id, name="Renamed").name == "Renamed"
        assert store.update(uuid4(), name="Nobody") is None

        new_id = uuid4()
        created = store.upsert(new_id, code=9, name="Fresh", account_type="asset")
        assert created.id == new_id
        assert store.upsert(new_id, name="Refreshed") is created
        assert created.name == "Refreshed"
