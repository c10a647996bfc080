"""
Module: ledger_kernel.services.journal_writer
Responsibility: Validate candidate journal entries and append them to the
    journal.  This is the ONLY code path that creates JournalEntry and
    JournalLine rows.
Architecture position: Kernel > Services.

Invariants enforced:
    - Period lock: the guard runs before anything else.
    - Balance: |sum(debit) - sum(credit)| <= tolerance, checked before any
      row is added.  An unbalanced candidate leaves the journal unchanged.
    - Sequence: seq = max(seq) + 1 inside the caller's transaction.
    - total_amount is the debit total.

Failure modes:
    - PeriodLockedError: effective_date on or before the lock date.
    - UnbalancedEntryError: carries debits, credits and tolerance.
    - InvalidLineError: no lines, or a line with neither side set.
    - AccountNotFoundError: a line addresses an unknown account code.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import EntrySpec, JournalEntryInfo, LineSpec
from ledger_kernel.domain.values import money
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    InvalidLineError,
    UnbalancedEntryError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import (
    JournalEntry,
    JournalEntryStatus,
    JournalLine,
    ReferenceType,
)
from ledger_kernel.selectors.journal_selector import to_entry_info
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.period_guard import PeriodLockGuard

logger = get_logger("services.journal_writer")

DEFAULT_TOLERANCE = Decimal("0.05")


class JournalWriter(BaseService[JournalEntry]):
    """
    Append-only writer for the journal.

    Contract:
        post_entry() either appends exactly one balanced entry and returns
        its DTO, or raises and appends nothing.

    Non-goals:
        - Does NOT commit; the caller owns the transaction.
    """

    def __init__(
        self,
        session: Session,
        period_guard: PeriodLockGuard,
        clock: Clock | None = None,
        tolerance: Decimal = DEFAULT_TOLERANCE,
    ):
        super().__init__(session)
        self._guard = period_guard
        self._clock = clock or SystemClock()
        self._tolerance = tolerance

    @property
    def tolerance(self) -> Decimal:
        return self._tolerance

    def validate(self, spec: EntrySpec) -> None:
        """Run the period and balance checks without writing anything."""
        self._guard.assert_unlocked(spec.effective_date)

        if not spec.lines:
            raise InvalidLineError(0, "entry has no lines")
        for line in spec.lines:
            if line.debit == 0 and line.credit == 0:
                raise InvalidLineError(line.account_code, "line has neither debit nor credit")

        debits = spec.total_debits
        credits = spec.total_credits
        if abs(debits - credits) > self._tolerance:
            logger.warning(
                "journal_entry_unbalanced",
                extra={
                    "reference_id": spec.reference_id,
                    "debits": str(debits),
                    "credits": str(credits),
                },
            )
            raise UnbalancedEntryError(debits, credits, self._tolerance)

    def post_entry(self, spec: EntrySpec) -> JournalEntryInfo:
        """
        Validate and append one journal entry.

        Raises:
            PeriodLockedError, UnbalancedEntryError, InvalidLineError,
            AccountNotFoundError.
        """
        self.validate(spec)

        accounts = self._load_accounts({line.account_code for line in spec.lines})

        seq = (self.session.scalar(select(func.max(JournalEntry.seq))) or 0) + 1
        entry = JournalEntry(
            seq=seq,
            effective_date=spec.effective_date,
            description=spec.description,
            reference_id=spec.reference_id,
            reference_type=ReferenceType(spec.reference_type).value,
            status=JournalEntryStatus.POSTED.value,
            total_amount=spec.total_debits,
            posted_at=self._clock.now(),
        )
        for line_seq, line in enumerate(spec.lines):
            entry.lines.append(
                JournalLine(
                    account=accounts[line.account_code],
                    line_seq=line_seq,
                    debit=line.debit,
                    credit=line.credit,
                )
            )

        self.session.add(entry)
        self.session.flush()

        with LogContext.bind(reference_id=spec.reference_id, entry_id=str(entry.id)):
            logger.info(
                "journal_entry_posted",
                extra={
                    "seq": seq,
                    "effective_date": str(spec.effective_date),
                    "reference_type": ReferenceType(spec.reference_type).value,
                    "total_amount": str(spec.total_debits),
                    "line_count": len(spec.lines),
                },
            )

        return to_entry_info(entry)

    def record_adjustment(
        self,
        effective_date: date,
        description: str,
        debit_account_code: int,
        credit_account_code: int,
        amount: Decimal,
        reference_id: str = "manual",
    ) -> JournalEntryInfo:
        """Post a two-line manual adjustment between two accounts."""
        amount = money(amount)
        if amount <= 0:
            raise InvalidLineError(debit_account_code, "adjustment amount must be positive")
        spec = EntrySpec(
            effective_date=effective_date,
            description=description,
            reference_id=reference_id,
            reference_type=ReferenceType.ADJUSTMENT,
            lines=(
                LineSpec.dr(debit_account_code, amount),
                LineSpec.cr(credit_account_code, amount),
            ),
        )
        return self.post_entry(spec)

    def _load_accounts(self, codes: set[int]) -> dict[int, Account]:
        found = {
            account.code: account
            for account in self.session.scalars(select(Account).where(Account.code.in_(codes)))
        }
        for code in sorted(codes):
            if code not in found:
                raise AccountNotFoundError(code)
        return found
