"""
Expense Module (``ledger_modules.expense``).

Business expenses booked against the expense account whose name matches
the category, paid from the bank.
"""

from ledger_modules.expense.models import Expense, ExpenseStatus
from ledger_modules.expense.profiles import EXPENSE_RULES

__all__ = ["EXPENSE_RULES", "Expense", "ExpenseStatus"]
