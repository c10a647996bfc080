"""
Module: ledger_kernel.models.journal
Responsibility: ORM persistence for journal entries and journal lines -- the
    single source of financial truth in this system.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Balance: sum(debit) == sum(credit) within tolerance (checked by
      JournalWriter before the entry is added; is_balanced is a read-side
      convenience).
    - Sequence: seq is monotonic and unique (uq_journal_seq).
    - Immutability: ORM listeners in db/immutability.py prevent UPDATE/DELETE
      of posted entries and their lines.

Failure modes:
    - UnbalancedEntryError if debits != credits at posting time.
    - ImmutabilityViolationError on UPDATE/DELETE of a posted entry/line.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UTCDateTime, UUIDString
from ledger_kernel.models.account import Account


class JournalEntryStatus(str, Enum):
    """Lifecycle status of a journal entry.  Entries are created posted."""

    POSTED = "posted"


class ReferenceType(str, Enum):
    """Kind of business record a journal entry was derived from."""

    ORDER = "order"
    BILL = "bill"
    PAYMENT = "payment"
    ADJUSTMENT = "adjustment"


class JournalEntry(TrackedBase):
    """
    Journal entry header -- the atomic unit of double-entry accounting.

    Contract:
        Created POSTED and never modified afterwards.  Corrections are new
        offsetting entries.
    """

    __tablename__ = "journal_entries"

    __table_args__ = (
        UniqueConstraint("seq", name="uq_journal_seq"),
        Index("idx_journal_effective_date", "effective_date"),
        Index("idx_journal_reference", "reference_type", "reference_id"),
    )

    # Monotonic posting order
    seq: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Accounting date (drives period lock and report ranges)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)

    description: Mapped[str] = mapped_column(String(500), nullable=False)

    # Business record this entry was derived from
    reference_id: Mapped[str] = mapped_column(String(100), nullable=False)

    reference_type: Mapped[ReferenceType] = mapped_column(String(20), nullable=False)

    status: Mapped[JournalEntryStatus] = mapped_column(
        String(10),
        default=JournalEntryStatus.POSTED,
        nullable=False,
    )

    # Sum of the debit side
    total_amount: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)

    # When the entry was posted (ledger clock, not database clock)
    posted_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="JournalLine.line_seq",
    )

    def __repr__(self) -> str:
        return f"<JournalEntry #{self.seq} {self.effective_date} {self.description!r}>"

    @property
    def total_debits(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0"))

    @property
    def total_credits(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0"))

    def is_balanced(self, tolerance: Decimal = Decimal("0")) -> bool:
        return abs(self.total_debits - self.total_credits) <= tolerance


class JournalLine(TrackedBase):
    """
    One debit or credit posting within a journal entry.

    By convention exactly one of debit/credit is non-zero; the model does not
    forbid both.  Both are non-negative.
    """

    __tablename__ = "journal_lines"

    __table_args__ = (
        Index("idx_line_entry", "journal_entry_id"),
        Index("idx_line_account", "account_id"),
    )

    journal_entry_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("journal_entries.id"),
        nullable=False,
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=False,
    )

    # Position within the entry
    line_seq: Mapped[int] = mapped_column(Integer, nullable=False)

    debit: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False, default=Decimal("0"))

    credit: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False, default=Decimal("0"))

    entry: Mapped[JournalEntry] = relationship(back_populates="lines")

    account: Mapped[Account] = relationship(back_populates="journal_lines")

    def __repr__(self) -> str:
        return f"<JournalLine {self.account_id} Dr {self.debit} Cr {self.credit}>"
