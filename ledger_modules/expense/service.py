"""
Expense Service (``ledger_modules.expense.service``).

Records business expenses and withdraws them again.  Recording publishes
``ExpenseAdded``; deleting removes the record and publishes
``ExpenseDeleted`` so the journal gets an offsetting entry instead of losing
the original one.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.db.store import CollectionStore
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import DateRange
from ledger_kernel.domain.events import ExpenseAdded, ExpenseDeleted
from ledger_kernel.domain.values import money
from ledger_kernel.exceptions import RecordNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.event_bus import EventBus
from ledger_kernel.services.period_guard import PeriodLockGuard
from ledger_modules._helpers import publish_event, unit_of_work
from ledger_modules.expense.models import Expense, ExpenseStatus
from ledger_modules.expense.orm import ExpenseModel

logger = get_logger("modules.expense.service")


class ExpenseService:
    """Transaction boundary: commits on success, rolls back on failure."""

    def __init__(
        self,
        session: Session,
        bus: EventBus,
        period_guard: PeriodLockGuard,
        clock: Clock | None = None,
    ):
        self._session = session
        self._bus = bus
        self._guard = period_guard
        self._clock = clock or SystemClock()
        self._expenses = CollectionStore(session, ExpenseModel)

    def add_expense(
        self,
        category: str,
        amount: Decimal,
        description: str,
        expense_date: date,
        payment_method: str = "bank",
    ) -> Expense:
        self._guard.assert_unlocked(expense_date)
        amount = money(amount)
        if amount <= 0:
            raise ValueError(f"Expense amount must be positive, got {amount}")

        with unit_of_work(self._session):
            expense = ExpenseModel(
                category=category,
                amount=amount,
                description=description,
                payment_method=payment_method,
                expense_date=expense_date,
                status=ExpenseStatus.APPROVED.value,
            )
            self._expenses.add(expense)

            publish_event(
                self._bus,
                ExpenseAdded(
                    expense_id=str(expense.id),
                    expense_date=expense_date,
                    category=category,
                    amount=amount,
                    description=description,
                    payment_method=payment_method,
                ),
            )

        logger.info("expense_added", extra={"category": category, "amount": str(amount)})
        return expense.to_dto()

    def list_expenses(self, date_range: DateRange | None = None) -> list[Expense]:
        query = select(ExpenseModel).order_by(ExpenseModel.expense_date, ExpenseModel.created_at)
        if date_range is not None:
            if date_range.start is not None:
                query = query.where(ExpenseModel.expense_date >= date_range.start)
            if date_range.end is not None:
                query = query.where(ExpenseModel.expense_date <= date_range.end)
        return [e.to_dto() for e in self._session.scalars(query)]

    def delete_expense(self, expense_id: UUID, reversal_date: date | None = None) -> Expense:
        """
        Remove an expense and post its reversal dated ``reversal_date``
        (today by default).
        """
        reversal_date = reversal_date or self._clock.today()
        self._guard.assert_unlocked(reversal_date)

        with unit_of_work(self._session):
            expense = self._expenses.get(expense_id)
            if expense is None:
                raise RecordNotFoundError("expenses", str(expense_id))
            dto = expense.to_dto()
            self._expenses.delete(expense.id)

            publish_event(
                self._bus,
                ExpenseDeleted(
                    expense_id=str(dto.id),
                    reversal_date=reversal_date,
                    category=dto.category,
                    amount=money(dto.amount),
                    description=dto.description,
                ),
            )

        logger.info("expense_deleted", extra={"expense_id": str(expense_id)})
        return dto
