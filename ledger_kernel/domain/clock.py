"""
Time source for the ledger.

Default payment dates, journal ``created_at`` stamps and payment-reminder
stamps are read from an injected Clock; only SystemClock looks at the wall
clock.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current instant, timezone-aware."""

    def today(self) -> date:
        """Posting date used when a caller gives none."""
        return self.now().date()


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """Clock frozen at ``fixed_time`` (2024-01-15 12:00 UTC by default)."""

    def __init__(self, fixed_time: datetime | None = None):
        self._now = fixed_time or datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now
