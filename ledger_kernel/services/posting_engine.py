"""
Module: ledger_kernel.services.posting_engine
Responsibility: The ledger's event handler.  Looks up the posting rule for
    a published event, computes its candidate entries and appends them
    through the JournalWriter.
Architecture position: Kernel > Services.

Invariants enforced:
    - All-or-nothing per event: every entry an event produces is written
      inside one SAVEPOINT; a failure rolls back that savepoint only and the
      surrounding business transaction is untouched.
    - Determinism: the same event always yields the same lines.

Failure modes:
    - Any posting error propagates out of handle(); when called through the
      EventBus it is caught, logged and reported in the PublishResult.
"""

from sqlalchemy.orm import Session

from ledger_kernel.domain.dtos import JournalEntryInfo
from ledger_kernel.domain.events import DomainEvent
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.posting_rules.base import PostingContext
from ledger_kernel.posting_rules.registry import PostingRuleRegistry
from ledger_kernel.services.event_bus import EventBus
from ledger_kernel.services.journal_writer import JournalWriter

logger = get_logger("services.posting_engine")


class PostingEngine:
    """Translate domain events into journal entries."""

    def __init__(
        self,
        session: Session,
        registry: PostingRuleRegistry,
        writer: JournalWriter,
        context: PostingContext,
    ):
        self.session = session
        self._registry = registry
        self._writer = writer
        self._context = context

    @property
    def registry(self) -> PostingRuleRegistry:
        return self._registry

    def handle(self, event: DomainEvent) -> list[JournalEntryInfo]:
        with LogContext.bind(event_type=event.event_type):
            specs = self._registry.compute_entries(event, self._context)
            posted: list[JournalEntryInfo] = []
            with self.session.begin_nested():
                for spec in specs:
                    posted.append(self._writer.post_entry(spec))
            logger.info(
                "event_posted",
                extra={
                    "event_id": str(event.event_id),
                    "entry_count": len(posted),
                },
            )
            return posted

    def attach(self, bus: EventBus) -> None:
        """Subscribe handle() to every event type with a registered rule."""
        for event_type in self._registry.list_event_types():
            bus.subscribe(event_type, self.handle)
