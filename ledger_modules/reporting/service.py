"""
Reporting Service (``ledger_modules.reporting.service``).

Read-only.  Gathers balances through ``LedgerSelector`` and hands them to
the pure builders in ``statements.py``.  When the journal shows no profit
and loss activity for the range, the statement is estimated from raw
orders (``OrderSource``) and recorded expenses instead.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.domain.dtos import DateRange
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import AccountType
from ledger_kernel.selectors.ledger_selector import LedgerSelector, TrialBalance
from ledger_kernel.services.role_resolver import RoleResolver
from ledger_modules.expense.orm import ExpenseModel
from ledger_modules.reporting.models import OrderSource, ProfitLossStatement, TaxReport
from ledger_modules.reporting.statements import (
    build_fallback_statement,
    build_statement_from_accounts,
    build_tax_report,
)

logger = get_logger("modules.reporting.service")

_COGS_ROLE = "CostOfGoodsSold"
_TAX_ROLE = "TaxPayable"


class ReportingService:
    """Profit and loss, tax and trial balance reports."""

    def __init__(
        self,
        session: Session,
        role_resolver: RoleResolver,
        cogs_ratio: Decimal,
        tax_split,
        tax_settings,
        order_source: OrderSource | None = None,
    ):
        self._session = session
        self._roles = role_resolver
        self._cogs_ratio = cogs_ratio
        self._tax_split = tax_split
        self._tax_settings = tax_settings
        self._order_source = order_source
        self._selector = LedgerSelector(session)

    def generate_statement(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> ProfitLossStatement:
        date_range = DateRange(start, end)
        if self._has_profit_and_loss_activity(date_range):
            statement = build_statement_from_accounts(
                self._selector.list_accounts(date_range),
                cogs_account_code=self._roles.resolve(_COGS_ROLE),
                start=start,
                end=end,
            )
        else:
            statement = self._fallback_statement(date_range)

        logger.info(
            "statement_generated",
            extra={
                "period": statement.period.value,
                "start": str(start) if start else None,
                "end": str(end) if end else None,
                "revenue": str(statement.revenue.total),
                "net_profit": str(statement.net_profit),
            },
        )
        return statement

    def get_tax_report(self, as_of: date | None = None) -> TaxReport:
        tax_payable = self._selector.balance_of(
            self._roles.resolve(_TAX_ROLE), DateRange(end=as_of)
        )
        return build_tax_report(tax_payable, self._tax_split, self._tax_settings)

    def trial_balance(self, start: date | None = None, end: date | None = None) -> TrialBalance:
        return self._selector.trial_balance(DateRange(start, end))

    def _has_profit_and_loss_activity(self, date_range: DateRange) -> bool:
        return any(
            row.account_type in (AccountType.INCOME, AccountType.EXPENSE)
            for row in self._selector.trial_balance(date_range).rows
        )

    def _fallback_statement(self, date_range: DateRange) -> ProfitLossStatement:
        orders = (
            list(self._order_source.list_orders(date_range))
            if self._order_source is not None
            else []
        )
        query = select(ExpenseModel.category, ExpenseModel.amount)
        if date_range.start is not None:
            query = query.where(ExpenseModel.expense_date >= date_range.start)
        if date_range.end is not None:
            query = query.where(ExpenseModel.expense_date <= date_range.end)
        expenses = [(category, amount) for category, amount in self._session.execute(query)]

        logger.info(
            "statement_fallback_used",
            extra={"order_count": len(orders), "expense_count": len(expenses)},
        )
        return build_fallback_statement(
            (o.subtotal for o in orders),
            expenses,
            self._cogs_ratio,
            start=date_range.start,
            end=date_range.end,
        )
