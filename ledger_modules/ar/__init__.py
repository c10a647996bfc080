"""
Accounts Receivable Module (``ledger_modules.ar``).

Customer invoices, payments against them and the batch payment-reminder
sweep.  Customer lookup and reminder delivery are supplied by the host
application through the ``CustomerDirectory`` and ``ReminderSender``
protocols.
"""

from ledger_modules.ar.models import (
    CustomerContact,
    CustomerDirectory,
    Invoice,
    InvoicePayment,
    InvoiceStatus,
    ReminderSender,
)
from ledger_modules.ar.profiles import AR_RULES

__all__ = [
    "AR_RULES",
    "CustomerContact",
    "CustomerDirectory",
    "Invoice",
    "InvoicePayment",
    "InvoiceStatus",
    "ReminderSender",
]
