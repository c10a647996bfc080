"""
ledger_services.posting_orchestrator -- Central DI container for the ledger.

Responsibility:
    Creates every kernel and module service exactly once for a session and
    wires them together: the posting rules are registered, the posting
    engine is subscribed to the event bus, and every producer service gets
    the same bus, period guard and clock.

Invariants enforced:
    - Single-instance lifecycle: one bus, one guard, one writer per
      orchestrator.
    - DI transparency: all wiring is visible in ``__init__``.
    - One lock date: every service checks the period lock through the same
      PeriodLockGuard, built from the configuration's TaxSettings.

Usage:
    from ledger_services.posting_orchestrator import build_posting_orchestrator

    orchestrator = build_posting_orchestrator(session)
    orchestrator.bootstrap()
    orchestrator.sales.record_order(...)
    orchestrator.list_accounts()
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

from sqlalchemy.orm import Session

from ledger_config.schema import LedgerConfig
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import AccountInfo, DateRange, JournalEntryInfo
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import AccountType
from ledger_kernel.posting_rules.base import PostingContext
from ledger_kernel.posting_rules.registry import PostingRuleRegistry
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.services.chart_of_accounts import ChartOfAccountsService
from ledger_kernel.services.event_bus import EventBus
from ledger_kernel.services.journal_writer import JournalWriter
from ledger_kernel.services.period_guard import PeriodLockGuard
from ledger_kernel.services.posting_engine import PostingEngine
from ledger_kernel.services.role_resolver import RoleResolver
from ledger_modules._helpers import unit_of_work
from ledger_modules.ap.config import APConfig
from ledger_modules.ap.profiles import AP_RULES
from ledger_modules.ap.service import PayablesService
from ledger_modules.ar.profiles import AR_RULES
from ledger_modules.ar.service import ReceivablesService
from ledger_modules.expense.profiles import EXPENSE_RULES
from ledger_modules.expense.service import ExpenseService
from ledger_modules.reporting.models import OrderSource
from ledger_modules.reporting.service import ReportingService
from ledger_modules.sales.profiles import SALES_RULES
from ledger_modules.sales.service import SalesService

logger = get_logger("services.posting_orchestrator")

ALL_RULES = SALES_RULES + AP_RULES + AR_RULES + EXPENSE_RULES


class PostingOrchestrator:
    """
    Central factory for ledger services.

    Non-goals:
        - Does NOT own the Session lifecycle.  Module services commit their
          own units of work; kernel services only flush.
    """

    def __init__(
        self,
        session: Session,
        config: LedgerConfig,
        clock: Clock | None = None,
        order_source: OrderSource | None = None,
    ) -> None:
        self._session = session
        self._config = config
        self._clock = clock or SystemClock()

        # Kernel
        self.role_resolver = RoleResolver(config.role_map)
        self.period_guard = PeriodLockGuard.from_settings(config.tax)
        self.chart_of_accounts = ChartOfAccountsService(
            session,
            default_expense_code=config.default_expense_account,
            cogs_code=config.role_map.get("CostOfGoodsSold"),
        )
        self.journal_writer = JournalWriter(
            session,
            self.period_guard,
            clock=self._clock,
            tolerance=config.balance_tolerance,
        )
        self.ledger_selector = LedgerSelector(session)
        self.journal_selector = JournalSelector(session)

        # Posting pipeline
        self.registry = PostingRuleRegistry()
        self.registry.register_all(ALL_RULES)
        self.posting_context = PostingContext(
            roles=self.role_resolver,
            cogs_ratio=config.cogs_ratio,
            expense_account_for=self.chart_of_accounts.expense_account_for,
        )
        self.posting_engine = PostingEngine(
            session, self.registry, self.journal_writer, self.posting_context
        )
        self.bus = EventBus()
        self.posting_engine.attach(self.bus)

        # Producers and reports
        self.sales = SalesService(session, self.bus, self.period_guard)
        self.payables = PayablesService(
            session,
            self.bus,
            self.period_guard,
            self.role_resolver,
            clock=self._clock,
            ap_config=APConfig.from_ledger_config(config),
        )
        self.receivables = ReceivablesService(
            session, self.bus, self.period_guard, clock=self._clock
        )
        self.expenses = ExpenseService(session, self.bus, self.period_guard, clock=self._clock)
        self.reporting = ReportingService(
            session,
            self.role_resolver,
            cogs_ratio=config.cogs_ratio,
            tax_split=config.tax_split,
            tax_settings=config.tax,
            order_source=order_source,
        )

        logger.info(
            "posting_orchestrator_ready",
            extra={
                "config_id": config.config_id,
                "rule_count": len(ALL_RULES),
                "lock_date": str(config.tax.lock_date) if config.tax.lock_date else None,
            },
        )

    @property
    def session(self) -> Session:
        return self._session

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def config(self) -> LedgerConfig:
        return self._config

    def bootstrap(self) -> None:
        """Seed the chart of accounts and the configured vendors (idempotent)."""
        with unit_of_work(self._session):
            self.chart_of_accounts.seed(self._config.accounts)
        self.payables.seed_vendors(self._config.vendors)

    # ------------------------------------------------------------------
    # Ledger queries
    # ------------------------------------------------------------------

    def list_accounts(self, date_range: DateRange | None = None) -> list[AccountInfo]:
        return self.ledger_selector.list_accounts(date_range)

    def list_entries(self, date_range: DateRange | None = None) -> list[JournalEntryInfo]:
        return self.journal_selector.list_entries(date_range)

    # ------------------------------------------------------------------
    # Administrative writes (own their unit of work)
    # ------------------------------------------------------------------

    def record_adjustment(
        self,
        effective_date: date,
        description: str,
        debit_account_code: int,
        credit_account_code: int,
        amount: Decimal,
        reference_id: str = "manual",
    ) -> JournalEntryInfo:
        with unit_of_work(self._session):
            return self.journal_writer.record_adjustment(
                effective_date,
                description,
                debit_account_code,
                credit_account_code,
                amount,
                reference_id=reference_id,
            )

    def add_account(
        self,
        code: int,
        name: str,
        account_type: AccountType | str,
        subtype: str | None = None,
    ) -> AccountInfo:
        with unit_of_work(self._session):
            return self.chart_of_accounts.add_account(code, name, account_type, subtype)

    def delete_account(self, code: int) -> None:
        with unit_of_work(self._session):
            self.chart_of_accounts.delete_account(code)


def build_posting_orchestrator(
    session: Session,
    config_path: Path | str | None = None,
    clock: Clock | None = None,
    order_source: OrderSource | None = None,
) -> PostingOrchestrator:
    """Build a PostingOrchestrator from the active configuration."""
    from ledger_config import get_active_config

    return PostingOrchestrator(
        session=session,
        config=get_active_config(config_path),
        clock=clock,
        order_source=order_source,
    )
