"""
Expense ORM Models (``ledger_modules.expense.orm``).
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase
from ledger_modules.expense.models import Expense, ExpenseStatus


class ExpenseModel(TrackedBase):
    __tablename__ = "expenses"

    __table_args__ = (Index("idx_expenses_date", "expense_date"),)

    category: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal]
    description: Mapped[str] = mapped_column(String(500), default="")
    payment_method: Mapped[str] = mapped_column(String(50), default="bank")
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=ExpenseStatus.APPROVED.value)

    def to_dto(self) -> Expense:
        return Expense(
            id=self.id,
            category=self.category,
            amount=self.amount,
            description=self.description,
            payment_method=self.payment_method,
            expense_date=self.expense_date,
            status=ExpenseStatus(self.status),
        )

    def __repr__(self) -> str:
        return f"<ExpenseModel {self.category} {self.amount}>"
