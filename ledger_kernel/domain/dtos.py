"""
Data Transfer Objects for the ledger kernel.

Frozen dataclasses that cross the boundary between services, selectors and
callers.  Services accept *Spec objects as input and return *Info objects;
ORM instances never leave the kernel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from ledger_kernel.domain.values import ZERO, money
from ledger_kernel.exceptions import InvalidLineError
from ledger_kernel.models.account import AccountType
from ledger_kernel.models.journal import ReferenceType


@dataclass(frozen=True)
class DateRange:
    """Inclusive date range; either bound may be open."""

    start: date | None = None
    end: date | None = None

    def __post_init__(self):
        if self.start and self.end and self.start > self.end:
            raise ValueError(f"start {self.start} is after end {self.end}")

    def contains(self, value: date) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


@dataclass(frozen=True)
class LineSpec:
    """
    One candidate journal line, addressed by account code.

    Guarantees: debit and credit are non-negative two-place Decimals.
    """

    account_code: int
    debit: Decimal = ZERO
    credit: Decimal = ZERO

    def __post_init__(self):
        object.__setattr__(self, "debit", money(self.debit))
        object.__setattr__(self, "credit", money(self.credit))
        if self.debit < 0 or self.credit < 0:
            raise InvalidLineError(self.account_code, "debit and credit must be non-negative")

    @classmethod
    def dr(cls, account_code: int, amount: Decimal) -> LineSpec:
        return cls(account_code=account_code, debit=amount)

    @classmethod
    def cr(cls, account_code: int, amount: Decimal) -> LineSpec:
        return cls(account_code=account_code, credit=amount)


@dataclass(frozen=True)
class EntrySpec:
    """A candidate journal entry handed to JournalWriter.post_entry()."""

    effective_date: date
    description: str
    reference_id: str
    reference_type: ReferenceType
    lines: tuple[LineSpec, ...]

    @property
    def total_debits(self) -> Decimal:
        return sum((line.debit for line in self.lines), ZERO)

    @property
    def total_credits(self) -> Decimal:
        return sum((line.credit for line in self.lines), ZERO)


@dataclass(frozen=True)
class JournalLineInfo:
    account_id: UUID
    account_code: int
    account_name: str
    debit: Decimal
    credit: Decimal


@dataclass(frozen=True)
class JournalEntryInfo:
    """Read-only view of a posted journal entry."""

    id: UUID
    seq: int
    effective_date: date
    description: str
    reference_id: str
    reference_type: ReferenceType
    status: str
    total_amount: Decimal
    created_at: datetime
    lines: tuple[JournalLineInfo, ...] = field(default_factory=tuple)

    def lines_for(self, account_code: int) -> tuple[JournalLineInfo, ...]:
        return tuple(line for line in self.lines if line.account_code == account_code)


@dataclass(frozen=True)
class AccountInfo:
    """An account with its balance derived from the journal."""

    id: UUID
    code: int
    name: str
    account_type: AccountType
    subtype: str | None
    is_system: bool
    balance: Decimal = ZERO
