"""
PeriodLockGuard -- rejects postings dated on or before the lock date.

Responsibility:
    Single check that every mutating ledger and sub-ledger operation runs
    first.  The lock date is handed in at construction (from TaxSettings),
    so each service carries the guard it was built with.

Invariants enforced:
    - A date <= lock_date is rejected before any state changes.
    - No lock date configured means every date is open.

Failure modes:
    - PeriodLockedError carrying posting_date and lock_date.
"""

from datetime import date

from ledger_kernel.exceptions import PeriodLockedError
from ledger_kernel.logging_config import get_logger

logger = get_logger("services.period_guard")


class PeriodLockGuard:
    """Closed-period enforcement for a configured lock date."""

    def __init__(self, lock_date: date | None = None):
        self._lock_date = lock_date

    @classmethod
    def from_settings(cls, settings) -> "PeriodLockGuard":
        """Build a guard from an object exposing ``lock_date`` (TaxSettings)."""
        return cls(getattr(settings, "lock_date", None))

    @property
    def lock_date(self) -> date | None:
        return self._lock_date

    def is_locked(self, posting_date: date) -> bool:
        return self._lock_date is not None and posting_date <= self._lock_date

    def assert_unlocked(self, posting_date: date) -> None:
        """
        Raises:
            PeriodLockedError: If posting_date is on or before the lock date.
        """
        if self.is_locked(posting_date):
            logger.warning(
                "period_locked_rejection",
                extra={
                    "posting_date": str(posting_date),
                    "lock_date": str(self._lock_date),
                },
            )
            raise PeriodLockedError(posting_date, self._lock_date)
