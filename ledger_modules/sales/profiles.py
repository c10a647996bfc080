"""
Sales posting rules.

Rules:
    OrderCreatedRule -- revenue recognition, cost of goods sold and the
                        wallet-funded portion of an order.
"""

from decimal import Decimal
from enum import Enum

from ledger_kernel.domain.dtos import EntrySpec, LineSpec
from ledger_kernel.domain.events import OrderCreated
from ledger_kernel.domain.values import ZERO, money
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import ReferenceType
from ledger_kernel.posting_rules.base import BasePostingRule, PostingContext

logger = get_logger("modules.sales.profiles")


class AccountRole(Enum):
    """Logical account roles for sales."""

    RECEIVABLE = "AccountsReceivable"
    REVENUE = "SalesRevenue"
    TAX_PAYABLE = "TaxPayable"
    DELIVERY_INCOME = "DeliveryIncome"
    OTHER_INCOME = "OtherIncome"
    COGS = "CostOfGoodsSold"
    INVENTORY = "Inventory"
    CUSTOMER_WALLET = "CustomerWallet"


class OrderCreatedRule(BasePostingRule):
    """
    Up to three entries per order:

    1. Dr AR (total); Cr Revenue (subtotal); Cr Tax Payable (tax);
       Cr Delivery Income (shipping); Other Income absorbs any residual.
    2. Dr COGS / Cr Inventory for the real cost, or subtotal x cogs_ratio.
    3. Dr Customer Wallet / Cr AR for the wallet-paid portion.
    """

    event_type = OrderCreated.event_type

    def compute_entries(self, event: OrderCreated, context: PostingContext) -> list[EntrySpec]:
        self.validate_event(event)
        roles = context.roles
        short_id = event.order_id[-6:]

        subtotal = money(event.subtotal)
        total = money(event.total)
        tax = money(event.tax_amount)
        shipping = money(event.shipping_cost)

        lines = []
        if total > 0:
            lines.append(LineSpec.dr(roles.resolve(AccountRole.RECEIVABLE.value), total))
        if subtotal > 0:
            lines.append(LineSpec.cr(roles.resolve(AccountRole.REVENUE.value), subtotal))
        if tax > 0:
            lines.append(LineSpec.cr(roles.resolve(AccountRole.TAX_PAYABLE.value), tax))
        if shipping > 0:
            lines.append(LineSpec.cr(roles.resolve(AccountRole.DELIVERY_INCOME.value), shipping))

        # Discounts, rounding and other adjustments
        residual = total - (subtotal + tax + shipping)
        if residual > 0:
            lines.append(LineSpec.cr(roles.resolve(AccountRole.OTHER_INCOME.value), residual))
        elif residual < 0:
            lines.append(LineSpec.dr(roles.resolve(AccountRole.OTHER_INCOME.value), -residual))
        if residual != 0:
            logger.info(
                "order_residual_absorbed",
                extra={"order_id": event.order_id, "residual": str(residual)},
            )

        entries = []
        if lines:
            entries.append(
                EntrySpec(
                    effective_date=event.order_date,
                    description=f"Invoice for Order #{short_id}",
                    reference_id=event.order_id,
                    reference_type=ReferenceType.ORDER,
                    lines=tuple(lines),
                )
            )

        cogs = (
            money(event.cost_of_goods)
            if event.cost_of_goods is not None
            else money(subtotal * Decimal(context.cogs_ratio))
        )
        if cogs > 0:
            entries.append(
                EntrySpec(
                    effective_date=event.order_date,
                    description=f"COGS for Order #{short_id}",
                    reference_id=event.order_id,
                    reference_type=ReferenceType.ORDER,
                    lines=(
                        LineSpec.dr(roles.resolve(AccountRole.COGS.value), cogs),
                        LineSpec.cr(roles.resolve(AccountRole.INVENTORY.value), cogs),
                    ),
                )
            )

        wallet = money(event.paid_with_wallet)
        if wallet > ZERO:
            entries.append(
                EntrySpec(
                    effective_date=event.order_date,
                    description=f"Wallet Payment for #{short_id}",
                    reference_id=event.order_id,
                    reference_type=ReferenceType.PAYMENT,
                    lines=(
                        LineSpec.dr(roles.resolve(AccountRole.CUSTOMER_WALLET.value), wallet),
                        LineSpec.cr(roles.resolve(AccountRole.RECEIVABLE.value), wallet),
                    ),
                )
            )

        return entries


SALES_RULES = (OrderCreatedRule(),)
