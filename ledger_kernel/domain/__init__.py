"""Pure domain types: clock, values, DTOs and domain events."""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.dtos import (
    AccountInfo,
    DateRange,
    EntrySpec,
    JournalEntryInfo,
    JournalLineInfo,
    LineSpec,
)
from ledger_kernel.domain.events import (
    BillApproved,
    BillPaid,
    DomainEvent,
    ExpenseAdded,
    ExpenseDeleted,
    InvoicePaid,
    OrderCreated,
    VendorCreditIssued,
)
from ledger_kernel.domain.values import money

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "AccountInfo",
    "DateRange",
    "EntrySpec",
    "JournalEntryInfo",
    "JournalLineInfo",
    "LineSpec",
    "DomainEvent",
    "OrderCreated",
    "BillApproved",
    "BillPaid",
    "VendorCreditIssued",
    "ExpenseAdded",
    "ExpenseDeleted",
    "InvoicePaid",
    "money",
]
