"""
Module: ledger_kernel.selectors.journal_selector
Responsibility: Read-only access to posted journal entries, returned as
    JournalEntryInfo DTOs in posting order.
Architecture position: Kernel > Selectors.
"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from ledger_kernel.domain.dtos import DateRange, JournalEntryInfo, JournalLineInfo
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import (
    JournalEntry,
    JournalEntryStatus,
    JournalLine,
    ReferenceType,
)
from ledger_kernel.selectors.base import BaseSelector


def to_entry_info(entry: JournalEntry) -> JournalEntryInfo:
    """Convert a JournalEntry ORM instance to its DTO."""
    return JournalEntryInfo(
        id=entry.id,
        seq=entry.seq,
        effective_date=entry.effective_date,
        description=entry.description,
        reference_id=entry.reference_id,
        reference_type=ReferenceType(entry.reference_type),
        status=JournalEntryStatus(entry.status).value,
        total_amount=entry.total_amount,
        created_at=entry.posted_at,
        lines=tuple(
            JournalLineInfo(
                account_id=line.account_id,
                account_code=line.account.code,
                account_name=line.account.name,
                debit=line.debit,
                credit=line.credit,
            )
            for line in entry.lines
        ),
    )


class JournalSelector(BaseSelector[JournalEntry]):
    """Queries over the append-only journal."""

    def __init__(self, session: Session):
        super().__init__(session)

    def _base_query(self):
        return select(JournalEntry).options(
            selectinload(JournalEntry.lines).selectinload(JournalLine.account)
        )

    def list_entries(self, date_range: DateRange | None = None) -> list[JournalEntryInfo]:
        """Entries whose effective date lies in the range, in posting order."""
        query = self._base_query()
        if date_range is not None:
            if date_range.start is not None:
                query = query.where(JournalEntry.effective_date >= date_range.start)
            if date_range.end is not None:
                query = query.where(JournalEntry.effective_date <= date_range.end)
        entries = self.session.scalars(query.order_by(JournalEntry.seq)).all()
        return [to_entry_info(entry) for entry in entries]

    def get_entry(self, entry_id: UUID) -> JournalEntryInfo | None:
        entry = self.session.scalar(self._base_query().where(JournalEntry.id == entry_id))
        return to_entry_info(entry) if entry is not None else None

    def entries_for_reference(self, reference_id: str) -> list[JournalEntryInfo]:
        query = (
            self._base_query()
            .where(JournalEntry.reference_id == reference_id)
            .order_by(JournalEntry.seq)
        )
        return [to_entry_info(entry) for entry in self.session.scalars(query).all()]

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(JournalEntry)) or 0

    def lines_touching(self, account_code: int) -> int:
        """Number of posted lines that reference the account."""
        query = (
            select(func.count())
            .select_from(JournalLine)
            .join(Account, JournalLine.account_id == Account.id)
            .where(Account.code == account_code)
        )
        return self.session.scalar(query) or 0
