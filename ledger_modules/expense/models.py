"""
Expense Domain Models (``ledger_modules.expense.models``).
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID


class ExpenseStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"


@dataclass(frozen=True)
class Expense:
    """A business expense; recording one posts one journal entry."""

    id: UUID
    category: str
    amount: Decimal
    description: str
    payment_method: str
    expense_date: date
    status: ExpenseStatus = ExpenseStatus.APPROVED
