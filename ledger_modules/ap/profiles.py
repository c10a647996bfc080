"""
Accounts Payable posting rules.

Rules:
    BillApprovedRule        -- Dr COGS (or mapped expense) / Cr AP
    BillPaidRule            -- Dr AP / Cr Bank (Cash for cash payments)
    VendorCreditIssuedRule  -- Dr AP / Cr COGS (or mapped expense)
"""

from enum import Enum

from ledger_kernel.domain.dtos import EntrySpec, LineSpec
from ledger_kernel.domain.events import BillApproved, BillPaid, VendorCreditIssued
from ledger_kernel.models.journal import ReferenceType
from ledger_kernel.posting_rules.base import BasePostingRule, PostingContext


class AccountRole(Enum):
    """Logical account roles for AP."""

    AP_LIABILITY = "AccountsPayable"
    COGS = "CostOfGoodsSold"
    BANK = "Bank"
    CASH = "Cash"


def _cost_account(context: PostingContext, expense_account_code: int | None) -> int:
    if expense_account_code is not None:
        return expense_account_code
    return context.roles.resolve(AccountRole.COGS.value)


class BillApprovedRule(BasePostingRule):
    event_type = BillApproved.event_type

    def compute_entries(self, event: BillApproved, context: PostingContext) -> list[EntrySpec]:
        self.validate_event(event)
        return [
            EntrySpec(
                effective_date=event.bill_date,
                description=f"Bill from {event.vendor_name}",
                reference_id=event.bill_id,
                reference_type=ReferenceType.BILL,
                lines=(
                    LineSpec.dr(_cost_account(context, event.expense_account_code), event.amount),
                    LineSpec.cr(context.roles.resolve(AccountRole.AP_LIABILITY.value), event.amount),
                ),
            )
        ]


class BillPaidRule(BasePostingRule):
    event_type = BillPaid.event_type

    def compute_entries(self, event: BillPaid, context: PostingContext) -> list[EntrySpec]:
        self.validate_event(event)
        role = AccountRole.CASH if event.method.lower() == "cash" else AccountRole.BANK
        return [
            EntrySpec(
                effective_date=event.payment_date,
                description=f"Payment for Bill #{event.bill_id}",
                reference_id=event.bill_id,
                reference_type=ReferenceType.PAYMENT,
                lines=(
                    LineSpec.dr(context.roles.resolve(AccountRole.AP_LIABILITY.value), event.amount),
                    LineSpec.cr(context.roles.resolve(role.value), event.amount),
                ),
            )
        ]


class VendorCreditIssuedRule(BasePostingRule):
    event_type = VendorCreditIssued.event_type

    def compute_entries(self, event: VendorCreditIssued, context: PostingContext) -> list[EntrySpec]:
        self.validate_event(event)
        return [
            EntrySpec(
                effective_date=event.credit_date,
                description=f"Credit from {event.vendor_name}",
                reference_id=event.credit_id,
                reference_type=ReferenceType.ADJUSTMENT,
                lines=(
                    LineSpec.dr(context.roles.resolve(AccountRole.AP_LIABILITY.value), event.amount),
                    LineSpec.cr(_cost_account(context, event.expense_account_code), event.amount),
                ),
            )
        ]


AP_RULES = (BillApprovedRule(), BillPaidRule(), VendorCreditIssuedRule())
