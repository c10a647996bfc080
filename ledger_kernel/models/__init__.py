"""SQLAlchemy ORM models for the ledger kernel."""

from ledger_kernel.models.account import Account, AccountType
from ledger_kernel.models.journal import (
    JournalEntry,
    JournalEntryStatus,
    JournalLine,
    ReferenceType,
)

__all__ = [
    "Account",
    "AccountType",
    "JournalEntry",
    "JournalEntryStatus",
    "JournalLine",
    "ReferenceType",
]
