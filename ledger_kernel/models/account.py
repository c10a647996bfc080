"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for the Chart of Accounts (CoA) -- the target
    of every journal line.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - code is unique and numeric; it is the CoA sort key.
    - balance is NOT a column.  Balances are derived from journal lines on
      every read (see selectors/ledger_selector.py).
    - System accounts (is_system=True) are never deleted (enforced by
      ChartOfAccountsService and db/immutability.py).

Failure modes:
    - AccountNotFoundError when a posting references a non-existent code.
    - SystemAccountError when deletion of a system account is attempted.
"""

from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase

if TYPE_CHECKING:
    from ledger_kernel.models.journal import JournalLine


class AccountType(str, Enum):
    """Types of accounts in the chart of accounts."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def is_debit_normal(self) -> bool:
        """Asset and Expense balances grow with debits; all others with credits."""
        return self in (AccountType.ASSET, AccountType.EXPENSE)


class Account(TrackedBase):
    """
    Chart of Accounts entry.

    Contract:
        Account.code is globally unique (uq_account_code).  account_type
        decides the balance sign convention for every line that touches it.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint("code", name="uq_account_code"),
        Index("idx_account_type", "account_type"),
    )

    # Numeric account code, e.g. 1200 for Accounts Receivable
    code: Mapped[int] = mapped_column(Integer, nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    account_type: Mapped[AccountType] = mapped_column(String(20), nullable=False)

    # Free-form classification (Cash, Bank, Current, Fixed, COS, Operating, ...)
    subtype: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Protected from deletion
    is_system: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    journal_lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="account",
        lazy="dynamic",
    )

    def __repr__(self) -> str:
        return f"<Account {self.code}: {self.name}>"

    @property
    def type(self) -> AccountType:
        return AccountType(self.account_type)

    @property
    def is_debit_normal(self) -> bool:
        return self.type.is_debit_normal
