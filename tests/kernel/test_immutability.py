"""
Tests for ORM-level immutability of the journal and system accounts.

Posted entries and their lines can never be updated or deleted through
the ORM; corrections are new offsetting entries.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from ledger_kernel.exceptions import ImmutabilityViolationError, SystemAccountError
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import JournalEntry, JournalLine


@pytest.fixture
def posted_entry(orchestrator, session):
    info = orchestrator.record_adjustment(
        date(2024, 1, 3), "Capital", 1010, 3000, Decimal("100")
    )
    return session.get(JournalEntry, info.id)


class TestJournalEntryImmutability:
    def test_update_blocked(self, session, posted_entry):
        posted_entry.description = "Rewritten"
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert exc_info.value.entity_type == "JournalEntry"

    def test_delete_blocked(self, session, posted_entry):
        session.delete(posted_entry)
        with pytest.raises(ImmutabilityViolationError):
            session.flush()


class TestJournalLineImmutability:
    def test_amount_change_blocked(self, session, posted_entry):
        line = session.scalars(
            select(JournalLine).where(JournalLine.journal_entry_id == posted_entry.id)
        ).first()
        line.debit = Decimal("999")
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert exc_info.value.entity_type == "JournalLine"


class TestSystemAccountProtection:
    def test_orm_delete_of_system_account_blocked(self, orchestrator, session):
        cash = session.scalar(select(Account).where(Account.code == 1000))
        session.delete(cash)
        with pytest.raises(SystemAccountError):
            session.flush()
