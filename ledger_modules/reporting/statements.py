"""
Pure financial statement transformation functions.

These functions turn account balances (or, for the fallback path, raw
order and expense figures) into report dataclasses.  ZERO I/O. ZERO side
effects.  All monetary values are Decimal.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from ledger_kernel.domain.dtos import AccountInfo
from ledger_kernel.domain.values import ZERO, money, percent
from ledger_kernel.models.account import AccountType
from ledger_modules.reporting.models import (
    BreakdownItem,
    ProfitLossStatement,
    StatementPeriod,
    StatementSection,
    TaxReport,
)


def _breakdown(accounts: Iterable[AccountInfo]) -> tuple[BreakdownItem, ...]:
    return tuple(
        BreakdownItem(name=a.name, amount=a.balance, account_code=a.code)
        for a in sorted(accounts, key=lambda a: a.code)
        if a.balance != 0
    )


def build_statement_from_accounts(
    accounts: Sequence[AccountInfo],
    cogs_account_code: int,
    start: date | None = None,
    end: date | None = None,
) -> ProfitLossStatement:
    """
    Build a profit and loss statement from account balances.

    Revenue is the sum of Income balances.  COGS is the balance of the COGS
    account; the expense section covers every other Expense account.
    """
    income = [a for a in accounts if a.account_type == AccountType.INCOME]
    expense = [a for a in accounts if a.account_type == AccountType.EXPENSE]

    revenue_total = sum((a.balance for a in income), ZERO)
    expense_total = sum((a.balance for a in expense), ZERO)
    cogs = next((a.balance for a in expense if a.code == cogs_account_code), ZERO)
    operating = [a for a in expense if a.code != cogs_account_code]

    net_profit = revenue_total - expense_total
    return ProfitLossStatement(
        period=StatementPeriod.CURRENT,
        revenue=StatementSection(total=revenue_total, breakdown=_breakdown(income)),
        cogs=cogs,
        gross_profit=revenue_total - cogs,
        expenses=StatementSection(total=expense_total - cogs, breakdown=_breakdown(operating)),
        net_profit=net_profit,
        net_profit_margin=percent(net_profit, revenue_total),
        start=start,
        end=end,
    )


def build_fallback_statement(
    order_subtotals: Iterable[Decimal],
    expenses: Iterable[tuple[str, Decimal]],
    cogs_ratio: Decimal,
    start: date | None = None,
    end: date | None = None,
) -> ProfitLossStatement:
    """
    Estimate a statement from raw orders and expenses when the journal has
    no profit and loss activity.  COGS is ``revenue x cogs_ratio``.
    """
    revenue = money(sum((money(s) for s in order_subtotals), ZERO))
    cogs = money(revenue * cogs_ratio)
    gross_profit = revenue - cogs

    by_category: dict[str, Decimal] = {}
    for category, amount in expenses:
        by_category[category] = by_category.get(category, ZERO) + money(amount)
    expense_total = sum(by_category.values(), ZERO)

    net_profit = gross_profit - expense_total
    return ProfitLossStatement(
        period=StatementPeriod.FALLBACK,
        revenue=StatementSection(total=revenue),
        cogs=cogs,
        gross_profit=gross_profit,
        expenses=StatementSection(
            total=expense_total,
            breakdown=tuple(
                BreakdownItem(name=category, amount=amount)
                for category, amount in sorted(by_category.items())
            ),
        ),
        net_profit=net_profit,
        net_profit_margin=percent(net_profit, revenue),
        start=start,
        end=end,
    )


def build_tax_report(tax_payable: Decimal, split, settings) -> TaxReport:
    """Split the tax payable balance into its IGST / CGST / SGST shares."""
    return TaxReport(
        total_tax=tax_payable,
        igst=money(tax_payable * split.igst),
        cgst=money(tax_payable * split.cgst),
        sgst=money(tax_payable * split.sgst),
        ur_sales=ZERO,
        is_registered=settings.is_registered,
        gstin=settings.gstin,
        state=settings.state,
    )


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to a plain dict for JSON serialization.

    Decimal -> str, UUID -> str, date -> ISO string, Enum -> value,
    tuples -> lists, nested dataclasses -> nested dicts.
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
