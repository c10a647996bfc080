"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Read-only balance queries: per-account balances, the chart of
    accounts with derived balances, and the trial balance.  The ledger is a
    derived view over posted JournalLines -- there are no stored balances
    anywhere in the system.
Architecture position: Kernel > Selectors.  May import from models/ and
    selectors/base.py.

Invariants enforced:
    - No stored balances.  Every call re-scans the journal lines in range.
    - Sign convention: Asset and Expense accounts accumulate (debit - credit);
      Liability, Equity and Income accounts accumulate (credit - debit).
    - Determinism: the same journal always yields the same balances.

Failure modes:
    - Returns zero balances when no posted entries exist.
    - AccountNotFoundError from balance_of() for an unknown code.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.domain.dtos import AccountInfo, DateRange
from ledger_kernel.domain.values import ZERO, money
from ledger_kernel.exceptions import AccountNotFoundError
from ledger_kernel.models.account import Account, AccountType
from ledger_kernel.models.journal import JournalEntry, JournalEntryStatus, JournalLine
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class AccountTotals:
    """Raw debit/credit totals for one account."""

    account_id: UUID
    debit_total: Decimal
    credit_total: Decimal


@dataclass(frozen=True)
class TrialBalanceRow:
    """A single row in a trial balance report."""

    account_code: int
    account_name: str
    account_type: AccountType
    debit_total: Decimal
    credit_total: Decimal

    @property
    def balance(self) -> Decimal:
        """Balance in the account's natural direction."""
        return natural_balance(self.account_type, self.debit_total, self.credit_total)


@dataclass(frozen=True)
class TrialBalance:
    rows: tuple[TrialBalanceRow, ...]

    @property
    def total_debits(self) -> Decimal:
        return sum((row.debit_total for row in self.rows), ZERO)

    @property
    def total_credits(self) -> Decimal:
        return sum((row.credit_total for row in self.rows), ZERO)

    @property
    def is_balanced(self) -> bool:
        return self.total_debits == self.total_credits


def natural_balance(
    account_type: AccountType,
    debit_total: Decimal,
    credit_total: Decimal,
) -> Decimal:
    """
    Compute balance adjusted for the account's normal side.

    DEBIT-normal (ASSET, EXPENSE): balance = debit_total - credit_total
    CREDIT-normal (LIABILITY, EQUITY, INCOME): balance = credit_total - debit_total
    """
    if AccountType(account_type).is_debit_normal:
        return debit_total - credit_total
    return credit_total - debit_total


class LedgerSelector(BaseSelector[JournalLine]):
    """
    Selector for ledger queries -- the authoritative balance computation.

    Contract:
        All queries cover posted entries whose effective_date lies in the
        optional DateRange.  Results are always recomputed from the lines.

    Non-goals:
        - No caching or materialised running balances.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def _line_query(self, date_range: DateRange | None):
        query = (
            select(JournalLine.account_id, JournalLine.debit, JournalLine.credit)
            .join(JournalEntry, JournalLine.journal_entry_id == JournalEntry.id)
            .where(JournalEntry.status == JournalEntryStatus.POSTED.value)
        )
        if date_range is not None:
            if date_range.start is not None:
                query = query.where(JournalEntry.effective_date >= date_range.start)
            if date_range.end is not None:
                query = query.where(JournalEntry.effective_date <= date_range.end)
        return query

    def account_totals(self, date_range: DateRange | None = None) -> dict[UUID, AccountTotals]:
        """Scan every line in range and total debits and credits per account."""
        debits: dict[UUID, Decimal] = {}
        credits: dict[UUID, Decimal] = {}
        for account_id, debit, credit in self.session.execute(self._line_query(date_range)):
            debits[account_id] = debits.get(account_id, ZERO) + (debit or ZERO)
            credits[account_id] = credits.get(account_id, ZERO) + (credit or ZERO)
        return {
            account_id: AccountTotals(
                account_id=account_id,
                debit_total=money(debits[account_id]),
                credit_total=money(credits[account_id]),
            )
            for account_id in debits
        }

    def list_accounts(self, date_range: DateRange | None = None) -> list[AccountInfo]:
        """
        Return the chart of accounts ordered by code, each with its derived
        balance over the range.
        """
        totals = self.account_totals(date_range)
        accounts = self.session.scalars(select(Account).order_by(Account.code)).all()
        result = []
        for account in accounts:
            row = totals.get(account.id)
            balance = (
                natural_balance(account.account_type, row.debit_total, row.credit_total)
                if row is not None
                else ZERO
            )
            result.append(
                AccountInfo(
                    id=account.id,
                    code=account.code,
                    name=account.name,
                    account_type=AccountType(account.account_type),
                    subtype=account.subtype,
                    is_system=account.is_system,
                    balance=balance,
                )
            )
        return result

    def balance_of(self, account_code: int, date_range: DateRange | None = None) -> Decimal:
        account = self.session.scalar(select(Account).where(Account.code == account_code))
        if account is None:
            raise AccountNotFoundError(account_code)
        row = self.account_totals(date_range).get(account.id)
        if row is None:
            return ZERO
        return natural_balance(account.account_type, row.debit_total, row.credit_total)

    def trial_balance(self, date_range: DateRange | None = None) -> TrialBalance:
        """One row per account with activity in range, ordered by code."""
        totals = self.account_totals(date_range)
        accounts = self.session.scalars(select(Account).order_by(Account.code)).all()
        rows = tuple(
            TrialBalanceRow(
                account_code=account.code,
                account_name=account.name,
                account_type=AccountType(account.account_type),
                debit_total=totals[account.id].debit_total,
                credit_total=totals[account.id].credit_total,
            )
            for account in accounts
            if account.id in totals
        )
        return TrialBalance(rows=rows)

    def has_activity(self, date_range: DateRange | None = None) -> bool:
        query = self._line_query(date_range).limit(1)
        return self.session.execute(query).first() is not None
