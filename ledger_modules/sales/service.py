"""
Sales producer (``ledger_modules.sales.service``).

Announces placed orders to the ledger.  Orders themselves live in the host
application; this service checks the period lock and publishes
``OrderCreated`` so the posting engine can book revenue, COGS and wallet
settlement.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from ledger_kernel.domain.events import OrderCreated
from ledger_kernel.domain.values import ZERO, money
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.event_bus import EventBus, PublishResult
from ledger_kernel.services.period_guard import PeriodLockGuard
from ledger_modules._helpers import publish_event, unit_of_work

logger = get_logger("modules.sales.service")


class SalesService:
    """Transaction boundary: commits on success, rolls back on failure."""

    def __init__(self, session: Session, bus: EventBus, period_guard: PeriodLockGuard):
        self._session = session
        self._bus = bus
        self._guard = period_guard

    def record_order(
        self,
        order_id: str,
        order_date: date,
        subtotal: Decimal,
        total: Decimal,
        tax_amount: Decimal = ZERO,
        shipping_cost: Decimal = ZERO,
        paid_with_wallet: Decimal = ZERO,
        cost_of_goods: Decimal | None = None,
    ) -> PublishResult:
        self._guard.assert_unlocked(order_date)
        for name, amount in (
            ("subtotal", subtotal),
            ("total", total),
            ("tax_amount", tax_amount),
            ("shipping_cost", shipping_cost),
            ("paid_with_wallet", paid_with_wallet),
        ):
            if money(amount) < 0:
                raise ValueError(f"Order {order_id}: {name} cannot be negative, got {amount}")

        event = OrderCreated(
            order_id=order_id,
            order_date=order_date,
            subtotal=money(subtotal),
            total=money(total),
            tax_amount=money(tax_amount),
            shipping_cost=money(shipping_cost),
            paid_with_wallet=money(paid_with_wallet),
            cost_of_goods=money(cost_of_goods) if cost_of_goods is not None else None,
        )
        with unit_of_work(self._session):
            result = publish_event(self._bus, event)

        logger.info(
            "order_recorded",
            extra={
                "order_id": order_id,
                "total": str(event.total),
                "posted": result.ok,
            },
        )
        return result
