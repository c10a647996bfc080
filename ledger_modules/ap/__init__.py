"""
Accounts Payable Module (``ledger_modules.ap``).

Responsibility
--------------
Vendors, bills with maker-checker approval, bill payments, vendor credits
and reconciliation of the AP control account against vendor balances.

Architecture position
---------------------
**Modules layer** -- frozen models, ORM, posting rules and a service facade
that publishes domain events for the kernel posting engine.
"""

from ledger_modules.ap.config import APConfig
from ledger_modules.ap.models import (
    ApprovalStatus,
    Bill,
    BillPayment,
    BillStatus,
    ControlAccountCheck,
    Vendor,
    VendorCredit,
)
from ledger_modules.ap.profiles import AP_RULES

__all__ = [
    "APConfig",
    "AP_RULES",
    "ApprovalStatus",
    "Bill",
    "BillPayment",
    "BillStatus",
    "ControlAccountCheck",
    "Vendor",
    "VendorCredit",
]
