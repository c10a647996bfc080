"""
Accounts Receivable Domain Models (``ledger_modules.ar.models``).

Frozen value objects for customer invoices and their payments, plus the
protocols the host application implements for customer lookup and reminder
delivery.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Protocol, runtime_checkable
from uuid import UUID


class InvoiceStatus(Enum):
    OPEN = "open"
    PARTIAL = "partial"
    PAID = "paid"


@dataclass(frozen=True)
class InvoicePayment:
    id: UUID
    payment_date: date
    amount: Decimal
    method: str


@dataclass(frozen=True)
class Invoice:
    """A customer invoice.  Created open with ``balance_due == amount``."""

    id: UUID
    number: str
    invoice_date: date
    due_date: date
    amount: Decimal
    balance_due: Decimal
    status: InvoiceStatus
    customer_name: str = ""
    tax_amount: Decimal = Decimal("0")
    order_id: str | None = None
    last_payment_reminder: datetime | None = None
    payments: tuple[InvoicePayment, ...] = field(default_factory=tuple)

    @property
    def is_outstanding(self) -> bool:
        return self.balance_due > 0 and self.status != InvoiceStatus.PAID


@dataclass(frozen=True)
class CustomerContact:
    """The person a payment reminder goes to."""

    customer_id: str
    name: str
    email: str


@runtime_checkable
class CustomerDirectory(Protocol):
    """Resolves the customer who owns an invoice."""

    def find_customer_for_invoice(self, invoice: Invoice) -> CustomerContact | None:
        ...


@runtime_checkable
class ReminderSender(Protocol):
    """Delivers a payment reminder."""

    def send_payment_reminder(self, invoice: Invoice, customer: CustomerContact) -> None:
        ...
