"""
Domain events published by producer modules and consumed by posting rules.

Producers (sales, payables, receivables, expenses) never write journal
entries themselves; they publish one of these events on the EventBus and the
ledger's posting handler translates it into balanced entries.

Every event is a frozen, keyword-only dataclass with a class-level
``event_type`` used as the bus subscription key.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from ledger_kernel.domain.values import ZERO


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for all domain events."""

    event_type: ClassVar[str] = "domain_event"

    event_id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True, kw_only=True)
class OrderCreated(DomainEvent):
    """A sales order was placed."""

    event_type: ClassVar[str] = "order.created"

    order_id: str
    order_date: date
    subtotal: Decimal
    total: Decimal
    tax_amount: Decimal = ZERO
    shipping_cost: Decimal = ZERO
    paid_with_wallet: Decimal = ZERO
    # Real cost of the goods sold, when the producer knows it
    cost_of_goods: Decimal | None = None


@dataclass(frozen=True, kw_only=True)
class BillApproved(DomainEvent):
    """A vendor bill passed approval and now affects Accounts Payable."""

    event_type: ClassVar[str] = "bill.approved"

    bill_id: str
    bill_date: date
    vendor_id: str
    vendor_name: str
    amount: Decimal
    expense_account_code: int | None = None


@dataclass(frozen=True, kw_only=True)
class BillPaid(DomainEvent):
    """A payment was applied against a vendor bill."""

    event_type: ClassVar[str] = "bill.paid"

    bill_id: str
    payment_date: date
    vendor_id: str
    amount: Decimal
    method: str = "bank"


@dataclass(frozen=True, kw_only=True)
class VendorCreditIssued(DomainEvent):
    """A vendor issued a credit note reducing what we owe."""

    event_type: ClassVar[str] = "vendor_credit.issued"

    credit_id: str
    credit_date: date
    vendor_id: str
    vendor_name: str
    amount: Decimal
    expense_account_code: int | None = None


@dataclass(frozen=True, kw_only=True)
class ExpenseAdded(DomainEvent):
    """A business expense was recorded."""

    event_type: ClassVar[str] = "expense.added"

    expense_id: str
    expense_date: date
    category: str
    amount: Decimal
    description: str
    payment_method: str = "bank"


@dataclass(frozen=True, kw_only=True)
class ExpenseDeleted(DomainEvent):
    """A recorded expense was withdrawn; its posting must be offset."""

    event_type: ClassVar[str] = "expense.deleted"

    expense_id: str
    reversal_date: date
    category: str
    amount: Decimal
    description: str


@dataclass(frozen=True, kw_only=True)
class InvoicePaid(DomainEvent):
    """A customer payment was applied against an invoice."""

    event_type: ClassVar[str] = "invoice.paid"

    invoice_id: str
    payment_date: date
    amount: Decimal
    method: str = "bank"
