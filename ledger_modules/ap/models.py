"""
Accounts Payable Domain Models (``ledger_modules.ap.models``).

Responsibility
--------------
Frozen value objects for the payables sub-ledger: vendors, bills, bill
payments, vendor credits and the control-account reconciliation result.

Invariants enforced
-------------------
* All monetary fields use ``Decimal``.
* All dataclasses are ``frozen=True``.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID


class BillStatus(Enum):
    PENDING_APPROVAL = "pending_approval"
    OPEN = "open"
    PARTIAL = "partial"
    PAID = "paid"


class ApprovalStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"


@dataclass(frozen=True)
class Vendor:
    """A supplier.  ``balance_due`` is a cached projection of AP."""

    id: UUID
    code: str
    name: str
    contact_person: str = ""
    email: str = ""
    category: str = ""
    balance_due: Decimal = Decimal("0")


@dataclass(frozen=True)
class BillPayment:
    id: UUID
    payment_date: date
    amount: Decimal
    method: str


@dataclass(frozen=True)
class Bill:
    """A vendor bill.  Created pending approval or, below threshold, open."""

    id: UUID
    vendor_id: UUID
    vendor_name: str
    bill_date: date
    amount: Decimal
    balance_due: Decimal
    status: BillStatus
    approval_status: ApprovalStatus
    due_date: date | None = None
    description: str = ""
    expense_account_code: int | None = None
    payments: tuple[BillPayment, ...] = field(default_factory=tuple)

    @property
    def is_approved(self) -> bool:
        return self.approval_status == ApprovalStatus.APPROVED


@dataclass(frozen=True)
class VendorCredit:
    id: UUID
    vendor_id: UUID
    vendor_name: str
    credit_date: date
    amount: Decimal
    reason: str = ""
    expense_account_code: int | None = None


@dataclass(frozen=True)
class ControlAccountCheck:
    """AP control account balance compared with the vendor sub-ledger."""

    control_balance: Decimal
    subledger_balance: Decimal

    @property
    def difference(self) -> Decimal:
        return self.control_balance - self.subledger_balance

    @property
    def is_reconciled(self) -> bool:
        return self.difference == 0
