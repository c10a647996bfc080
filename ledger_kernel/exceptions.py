"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers catch ledger failures by type, never by parsing messages.  Every
exception carries:
  1. A CODE class attribute (machine-readable, API-safe)
  2. Structured DATA attributes (not just a message string)

Example:
    try:
        writer.post_entry(candidate)
    except PeriodLockedError as e:
        log.warning("period locked until %s", e.lock_date)
        api_response(code=e.code, lock_date=e.lock_date)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerError (base)
    |
    +-- PostingError
    |   +-- UnbalancedEntryError
    |   +-- InvalidLineError
    |   +-- PostingRuleNotFoundError
    |
    +-- PeriodError
    |   +-- PeriodLockedError
    |
    +-- AccountError
    |   +-- AccountNotFoundError
    |   +-- AccountAlreadyExistsError
    |   +-- SystemAccountError
    |   +-- AccountReferencedError
    |   +-- AccountTypeMismatchError
    |   +-- MissingMappingError
    |
    +-- SubledgerError
    |   +-- RecordNotFoundError
    |   +-- InvalidPaymentError
    |   +-- InvalidTransitionError
    |   +-- UnresolvedCustomerError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
RECOVERY POLICY
===============================================================================

Fatal to the operation, surfaced to the caller:
    UnbalancedEntryError, PeriodLockedError, AccountNotFoundError,
    InvalidPaymentError, InvalidTransitionError, ImmutabilityViolationError

Recovered locally, logged, processing continues:
    MissingMappingError      -> posting falls back to the default account
    UnresolvedCustomerError  -> reminder sweep skips the invoice
"""

from datetime import date
from decimal import Decimal


class LedgerError(Exception):
    """
    Base exception for all ledger errors.

    All subclasses have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_ERROR"


# Posting-related exceptions


class PostingError(LedgerError):
    """Base exception for posting-related errors."""

    code: str = "POSTING_ERROR"


class UnbalancedEntryError(PostingError):
    """Journal entry debits do not equal credits within tolerance."""

    code: str = "UNBALANCED_ENTRY"

    def __init__(self, debits: Decimal, credits: Decimal, tolerance: Decimal):
        self.debits = debits
        self.credits = credits
        self.tolerance = tolerance
        super().__init__(
            f"Journal entry unbalanced: Dr {debits} != Cr {credits} "
            f"(tolerance {tolerance})"
        )


class InvalidLineError(PostingError):
    """A journal line is structurally invalid (e.g. negative amount)."""

    code: str = "INVALID_LINE"

    def __init__(self, account_code: int, reason: str):
        self.account_code = account_code
        self.reason = reason
        super().__init__(f"Invalid line for account {account_code}: {reason}")


class PostingRuleNotFoundError(PostingError):
    """No posting rule is registered for an event type."""

    code: str = "POSTING_RULE_NOT_FOUND"

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(f"No posting rule found for event type: {event_type}")


# Period-related exceptions


class PeriodError(LedgerError):
    """Base exception for period-related errors."""

    code: str = "PERIOD_ERROR"


class PeriodLockedError(PeriodError):
    """Posting date falls on or before the configured lock date."""

    code: str = "PERIOD_LOCKED"

    def __init__(self, posting_date: date, lock_date: date):
        self.posting_date = posting_date
        self.lock_date = lock_date
        super().__init__(
            f"Period locked: {posting_date.isoformat()} is on or before "
            f"lock date {lock_date.isoformat()}"
        )


# Account-related exceptions


class AccountError(LedgerError):
    """Base exception for account-related errors."""

    code: str = "ACCOUNT_ERROR"


class AccountNotFoundError(AccountError):
    """Account with given code was not found."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_code: int):
        self.account_code = account_code
        super().__init__(f"Account not found: {account_code}")


class AccountAlreadyExistsError(AccountError):
    """An account with this code already exists."""

    code: str = "ACCOUNT_ALREADY_EXISTS"

    def __init__(self, account_code: int):
        self.account_code = account_code
        super().__init__(f"Account already exists: {account_code}")


class SystemAccountError(AccountError):
    """System accounts are protected from deletion."""

    code: str = "SYSTEM_ACCOUNT"

    def __init__(self, account_code: int):
        self.account_code = account_code
        super().__init__(f"System account {account_code} cannot be deleted")


class AccountReferencedError(AccountError):
    """Account has journal lines and cannot be deleted."""

    code: str = "ACCOUNT_REFERENCED"

    def __init__(self, account_code: int):
        self.account_code = account_code
        super().__init__(
            f"Account {account_code} is referenced by journal lines and cannot be deleted"
        )


class AccountTypeMismatchError(AccountError):
    """Account exists but is not of the type the operation needs."""

    code: str = "ACCOUNT_TYPE_MISMATCH"

    def __init__(self, account_code: int, account_type: str, expected_type: str):
        self.account_code = account_code
        self.account_type = account_type
        self.expected_type = expected_type
        super().__init__(
            f"Account {account_code} is {account_type}, expected {expected_type}"
        )


class MissingMappingError(AccountError):
    """No account matches a category or role mapping."""

    code: str = "MISSING_MAPPING"

    def __init__(self, mapping: str, key: str):
        self.mapping = mapping
        self.key = key
        super().__init__(f"No {mapping} account mapping for '{key}'")


# Sub-ledger exceptions


class SubledgerError(LedgerError):
    """Base exception for receivables/payables errors."""

    code: str = "SUBLEDGER_ERROR"


class RecordNotFoundError(SubledgerError):
    """A sub-ledger record does not exist."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection} record not found: {record_id}")


class InvalidPaymentError(SubledgerError):
    """Payment amount cannot be applied to the record."""

    code: str = "INVALID_PAYMENT"

    def __init__(self, record_id: str, amount: Decimal, reason: str):
        self.record_id = record_id
        self.amount = amount
        self.reason = reason
        super().__init__(f"Cannot apply payment of {amount} to {record_id}: {reason}")


class InvalidTransitionError(SubledgerError):
    """A lifecycle transition is not allowed from the current status."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, record_id: str, current_status: str, action: str):
        self.record_id = record_id
        self.current_status = current_status
        self.action = action
        super().__init__(
            f"Cannot {action} record {record_id} in status '{current_status}'"
        )


class UnresolvedCustomerError(SubledgerError):
    """An invoice cannot be mapped to a customer."""

    code: str = "UNRESOLVED_CUSTOMER"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"No customer could be resolved for invoice {invoice_id}")


# Immutability exceptions


class ImmutabilityError(LedgerError):
    """Base exception for immutability errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """Attempted modification of an append-only record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(f"Cannot modify {entity_type} {entity_id}: {reason}")
