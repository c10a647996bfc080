"""Read-only query selectors over the journal."""

from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.selectors.ledger_selector import (
    LedgerSelector,
    TrialBalance,
    TrialBalanceRow,
    natural_balance,
)

__all__ = [
    "JournalSelector",
    "LedgerSelector",
    "TrialBalance",
    "TrialBalanceRow",
    "natural_balance",
]
