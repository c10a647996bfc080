"""
ORM-level protection for the append-only journal.

Listeners run during ``session.flush()``, before any SQL is sent:

    Entity        | Blocked                  | Raises
    --------------|--------------------------|---------------------------
    JournalEntry  | UPDATE, DELETE           | ImmutabilityViolationError
    JournalLine   | UPDATE, DELETE           | ImmutabilityViolationError
    Account       | DELETE when is_system    | SystemAccountError

A posted entry is corrected by posting another entry (a reversal or an
adjustment), never by editing it.  ``updated_at`` is audit metadata and may
change on any row.
"""

from sqlalchemy import event, inspect

from ledger_kernel.exceptions import ImmutabilityViolationError, SystemAccountError
from ledger_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

_AUDIT_FIELDS = frozenset({"updated_at"})


def _blocked(entity_type: str, target, operation: str, reason: str) -> ImmutabilityViolationError:
    logger.error(
        "immutability_violation_blocked",
        extra={"entity_type": entity_type, "entity_id": str(target.id), "operation": operation},
    )
    return ImmutabilityViolationError(entity_type, str(target.id), reason)


def _entry_before_update(mapper, connection, target):
    for attr in inspect(target).attrs:
        if attr.key in _AUDIT_FIELDS or attr.key == "lines":
            continue
        if attr.history.has_changes():
            raise _blocked(
                "JournalEntry", target, "UPDATE", f"field '{attr.key}' of a posted entry"
            )


def _entry_before_delete(mapper, connection, target):
    raise _blocked("JournalEntry", target, "DELETE", "posted entries cannot be deleted")


def _line_before_update(mapper, connection, target):
    raise _blocked("JournalLine", target, "UPDATE", "lines of a posted entry are final")


def _line_before_delete(mapper, connection, target):
    raise _blocked("JournalLine", target, "DELETE", "lines of a posted entry are final")


def _account_before_delete(mapper, connection, target):
    if target.is_system:
        logger.error(
            "system_account_delete_blocked",
            extra={"account_code": target.code, "entity_id": str(target.id)},
        )
        raise SystemAccountError(account_code=target.code)


def _listeners():
    from ledger_kernel.models.account import Account
    from ledger_kernel.models.journal import JournalEntry, JournalLine

    return (
        (JournalEntry, "before_update", _entry_before_update),
        (JournalEntry, "before_delete", _entry_before_delete),
        (JournalLine, "before_update", _line_before_update),
        (JournalLine, "before_delete", _line_before_delete),
        (Account, "before_delete", _account_before_delete),
    )


def register_immutability_listeners() -> None:
    """Install the listeners; already-installed ones are left alone."""
    for target, event_name, listener in _listeners():
        if not event.contains(target, event_name, listener):
            event.listen(target, event_name, listener)
