"""
Module: ledger_kernel.services.event_bus
Responsibility: In-process publish/subscribe between producer modules and
    the ledger's posting handler.
Architecture position: Kernel > Services.  Holds no session.

Invariants enforced:
    - Fan-out-and-wait: publish() returns only after every subscriber for
      the event type has completed or failed.
    - Isolation: a failing handler is logged and recorded in the
      PublishResult; siblings still run and the publisher never sees the
      exception.
    - Handlers run in subscription order.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from ledger_kernel.domain.events import DomainEvent
from ledger_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.event_bus")

Handler = Callable[[DomainEvent], object]


@dataclass(frozen=True)
class HandlerFailure:
    handler_name: str
    error_type: str
    message: str


@dataclass(frozen=True)
class PublishResult:
    """Outcome of one publish() call."""

    event_type: str
    handled: int = 0
    failures: tuple[HandlerFailure, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.failures


def _handler_name(handler: Handler) -> str:
    owner = getattr(handler, "__self__", None)
    name = getattr(handler, "__qualname__", None) or type(handler).__name__
    if owner is not None and "." not in name:
        return f"{type(owner).__name__}.{name}"
    return name


class EventBus:
    """Synchronous subscriber registry keyed by event type."""

    def __init__(self):
        self._handlers: dict[str, list[Handler]] = {}

    def subscribe(self, event_type: str | type[DomainEvent], handler: Handler) -> None:
        key = event_type if isinstance(event_type, str) else event_type.event_type
        self._handlers.setdefault(key, []).append(handler)
        logger.debug(
            "event_handler_subscribed",
            extra={"event_type": key, "handler": _handler_name(handler)},
        )

    def unsubscribe(self, event_type: str | type[DomainEvent], handler: Handler) -> None:
        key = event_type if isinstance(event_type, str) else event_type.event_type
        handlers = self._handlers.get(key)
        if not handlers:
            return
        self._handlers[key] = [h for h in handlers if h != handler]

    def subscribers(self, event_type: str) -> list[Handler]:
        return list(self._handlers.get(event_type, []))

    def publish(self, event: DomainEvent) -> PublishResult:
        """Invoke every subscriber for the event; never raises handler errors."""
        handlers = self.subscribers(event.event_type)
        failures: list[HandlerFailure] = []
        handled = 0

        with LogContext.bind(event_type=event.event_type):
            for handler in handlers:
                try:
                    handler(event)
                    handled += 1
                except Exception as exc:
                    name = _handler_name(handler)
                    logger.error(
                        "event_handler_failed",
                        extra={
                            "handler": name,
                            "event_id": str(event.event_id),
                            "error_type": type(exc).__name__,
                            "error": str(exc),
                        },
                        exc_info=True,
                    )
                    failures.append(HandlerFailure(name, type(exc).__name__, str(exc)))

            logger.debug(
                "event_published",
                extra={"handled": handled, "failed": len(failures)},
            )

        return PublishResult(
            event_type=event.event_type,
            handled=handled,
            failures=tuple(failures),
        )
