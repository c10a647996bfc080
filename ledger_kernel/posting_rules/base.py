"""
Base posting rule protocol.

Posting rules transform domain events into candidate journal entries
deterministically.  A rule never touches the session: it reads the event and
the PostingContext and returns EntrySpecs for the JournalWriter to validate
and append.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Protocol, runtime_checkable

from ledger_kernel.domain.dtos import EntrySpec
from ledger_kernel.domain.events import DomainEvent
from ledger_kernel.services.role_resolver import RoleResolver


@dataclass(frozen=True)
class PostingContext:
    """
    Everything a rule may consult besides the event itself.

    Attributes:
        roles: Role name -> account code bindings.
        cogs_ratio: Fraction of an order subtotal booked as COGS when the
            real cost is unknown.
        expense_account_for: Maps an expense category to an account code.
    """

    roles: RoleResolver
    cogs_ratio: Decimal
    expense_account_for: Callable[[str], int]


@runtime_checkable
class PostingRule(Protocol):
    """
    Protocol for posting rules.

    Each rule is:
    - Deterministic: Same event always produces same entries
    - Versioned: Several versions of a rule may be registered
    - Stateless: No side effects during computation
    """

    @property
    def event_type(self) -> str:
        """Event type this rule handles."""
        ...

    @property
    def version(self) -> int:
        """Version of this rule."""
        ...

    def compute_entries(self, event: DomainEvent, context: PostingContext) -> list[EntrySpec]:
        """
        Compute candidate journal entries from an event.

        Returns:
            List of EntrySpec, possibly empty when the event has no
            accounting effect.
        """
        ...


class BasePostingRule(ABC):
    """Abstract base class for posting rules."""

    @property
    @abstractmethod
    def event_type(self) -> str:
        pass

    @property
    def version(self) -> int:
        return 1

    @abstractmethod
    def compute_entries(self, event: DomainEvent, context: PostingContext) -> list[EntrySpec]:
        pass

    def validate_event(self, event: DomainEvent) -> None:
        """
        Validate that the event is suitable for this rule.

        Raises:
            ValueError: If the event type does not match.
        """
        if event.event_type != self.event_type:
            raise ValueError(
                f"Event type mismatch: expected {self.event_type}, "
                f"got {event.event_type}"
            )
