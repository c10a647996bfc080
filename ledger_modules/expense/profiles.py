"""
Expense posting rules.

Rules:
    ExpenseAddedRule    -- Dr mapped expense account / Cr Bank
    ExpenseDeletedRule  -- Dr Bank / Cr mapped expense account (reversal)

The expense account comes from ``PostingContext.expense_account_for``,
which falls back to the default expense account for unmapped categories.
"""

from enum import Enum

from ledger_kernel.domain.dtos import EntrySpec, LineSpec
from ledger_kernel.domain.events import ExpenseAdded, ExpenseDeleted
from ledger_kernel.models.journal import ReferenceType
from ledger_kernel.posting_rules.base import BasePostingRule, PostingContext


class AccountRole(Enum):
    BANK = "Bank"


class ExpenseAddedRule(BasePostingRule):
    event_type = ExpenseAdded.event_type

    def compute_entries(self, event: ExpenseAdded, context: PostingContext) -> list[EntrySpec]:
        self.validate_event(event)
        return [
            EntrySpec(
                effective_date=event.expense_date,
                description=event.description,
                reference_id=event.expense_id,
                reference_type=ReferenceType.ADJUSTMENT,
                lines=(
                    LineSpec.dr(context.expense_account_for(event.category), event.amount),
                    LineSpec.cr(context.roles.resolve(AccountRole.BANK.value), event.amount),
                ),
            )
        ]


class ExpenseDeletedRule(BasePostingRule):
    event_type = ExpenseDeleted.event_type

    def compute_entries(self, event: ExpenseDeleted, context: PostingContext) -> list[EntrySpec]:
        self.validate_event(event)
        return [
            EntrySpec(
                effective_date=event.reversal_date,
                description=f"Reversal: {event.description}",
                reference_id=event.expense_id,
                reference_type=ReferenceType.ADJUSTMENT,
                lines=(
                    LineSpec.dr(context.roles.resolve(AccountRole.BANK.value), event.amount),
                    LineSpec.cr(context.expense_account_for(event.category), event.amount),
                ),
            )
        ]


EXPENSE_RULES = (ExpenseAddedRule(), ExpenseDeletedRule())
