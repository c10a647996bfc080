"""
Reporting Domain Models (``ledger_modules.reporting.models``).

Frozen report structures returned by ``ReportingService`` and the pure
builders in ``statements.py``, plus the ``OrderSource`` protocol the
fallback statement reads raw orders through.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Protocol, runtime_checkable

from ledger_kernel.domain.dtos import DateRange


class StatementPeriod(str, Enum):
    """Where a statement's figures came from."""

    CURRENT = "Current"
    FALLBACK = "Fallback"


@dataclass(frozen=True)
class BreakdownItem:
    name: str
    amount: Decimal
    account_code: int | None = None


@dataclass(frozen=True)
class StatementSection:
    total: Decimal
    breakdown: tuple[BreakdownItem, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ProfitLossStatement:
    """
    Profit and loss for a date range.

    ``expenses`` excludes COGS; ``net_profit`` is revenue less COGS and all
    other expenses.  ``net_profit_margin`` is a percentage, 0 when revenue
    is 0.
    """

    period: StatementPeriod
    revenue: StatementSection
    cogs: Decimal
    gross_profit: Decimal
    expenses: StatementSection
    net_profit: Decimal
    net_profit_margin: Decimal
    start: date | None = None
    end: date | None = None


@dataclass(frozen=True)
class TaxReport:
    total_tax: Decimal
    igst: Decimal
    cgst: Decimal
    sgst: Decimal
    ur_sales: Decimal
    is_registered: bool = False
    gstin: str | None = None
    state: str = ""


@dataclass(frozen=True)
class OrderSummary:
    """The slice of a sales order the fallback statement needs."""

    order_id: str
    order_date: date
    subtotal: Decimal


@runtime_checkable
class OrderSource(Protocol):
    """Raw orders kept by the host application."""

    def list_orders(self, date_range: DateRange | None = None) -> Iterable[OrderSummary]:
        ...
