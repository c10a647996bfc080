"""
Accounts Receivable posting rules.

Rules:
    InvoicePaidRule -- Dr Cash (cash payments) or Bank / Cr AR
"""

from enum import Enum

from ledger_kernel.domain.dtos import EntrySpec, LineSpec
from ledger_kernel.domain.events import InvoicePaid
from ledger_kernel.models.journal import ReferenceType
from ledger_kernel.posting_rules.base import BasePostingRule, PostingContext


class AccountRole(Enum):
    """Logical account roles for AR."""

    RECEIVABLE = "AccountsReceivable"
    BANK = "Bank"
    CASH = "Cash"


class InvoicePaidRule(BasePostingRule):
    event_type = InvoicePaid.event_type

    def compute_entries(self, event: InvoicePaid, context: PostingContext) -> list[EntrySpec]:
        self.validate_event(event)
        role = AccountRole.CASH if event.method.lower() == "cash" else AccountRole.BANK
        return [
            EntrySpec(
                effective_date=event.payment_date,
                description=f"Payment for Inv #{event.invoice_id}",
                reference_id=event.invoice_id,
                reference_type=ReferenceType.PAYMENT,
                lines=(
                    LineSpec.dr(context.roles.resolve(role.value), event.amount),
                    LineSpec.cr(context.roles.resolve(AccountRole.RECEIVABLE.value), event.amount),
                ),
            )
        ]


AR_RULES = (InvoicePaidRule(),)
