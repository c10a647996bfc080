"""
Sales Module (``ledger_modules.sales``).

Books placed orders: receivable against revenue, tax and delivery income,
the estimated or actual cost of goods sold, and wallet settlement.
"""

from ledger_modules.sales.profiles import SALES_RULES, OrderCreatedRule
from ledger_modules.sales.service import SalesService

__all__ = ["SALES_RULES", "OrderCreatedRule", "SalesService"]
