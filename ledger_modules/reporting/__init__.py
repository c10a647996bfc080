"""
Reporting Module (``ledger_modules.reporting``).

Profit and loss statements, the tax report and the trial balance, all
derived from journal balances at read time.
"""

from ledger_modules.reporting.models import (
    BreakdownItem,
    OrderSource,
    OrderSummary,
    ProfitLossStatement,
    StatementPeriod,
    StatementSection,
    TaxReport,
)

__all__ = [
    "BreakdownItem",
    "OrderSource",
    "OrderSummary",
    "ProfitLossStatement",
    "StatementPeriod",
    "StatementSection",
    "TaxReport",
]
