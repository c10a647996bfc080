"""
Shared helpers for module service flows.

Used by ledger_modules/*/service.py for the commit/rollback transaction
boundary and for publishing domain events onto the bus.

Architecture: Modules layer. Imports only from ledger_kernel.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session

from ledger_kernel.domain.events import DomainEvent
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.event_bus import EventBus, PublishResult

logger = get_logger("modules.helpers")


@contextmanager
def unit_of_work(session: Session) -> Iterator[Session]:
    """Commit on success, rollback on any exception (module transaction boundary)."""
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def publish_event(bus: EventBus, event: DomainEvent) -> PublishResult:
    """
    Publish an event and log when any ledger handler failed.

    The business change that produced the event is kept either way.
    """
    result = bus.publish(event)
    if not result.ok:
        logger.warning(
            "event_handlers_failed",
            extra={
                "event_type": event.event_type,
                "event_id": str(event.event_id),
                "failures": [f.handler_name for f in result.failures],
            },
        )
    return result
