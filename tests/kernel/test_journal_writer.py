"""
Tests for JournalWriter -- the only path that appends to the journal.

Validates:
- Balanced entries are appended with sequential seq and posted status
- Unbalanced candidates are rejected and leave the journal untouched
- The 0.05 rounding tolerance
- Line validation (no lines, zero lines, unknown accounts)
- Manual two-line adjustments
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from ledger_kernel.domain.dtos import EntrySpec, LineSpec
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    InvalidLineError,
    UnbalancedEntryError,
)
from ledger_kernel.models.journal import ReferenceType

POSTING_DATE = date(2024, 1, 10)


def _spec(*lines: LineSpec, reference_id: str = "T-1") -> EntrySpec:
    return EntrySpec(
        effective_date=POSTING_DATE,
        description="Test entry",
        reference_id=reference_id,
        reference_type=ReferenceType.ADJUSTMENT,
        lines=tuple(lines),
    )


@pytest.fixture
def writer(orchestrator):
    return orchestrator.journal_writer


@pytest.fixture
def journal(orchestrator):
    return orchestrator.journal_selector


class TestPostEntry:
    def test_balanced_entry_is_appended(self, writer, journal, deterministic_clock):
        info = writer.post_entry(
            _spec(LineSpec.dr(1010, Decimal("250.00")), LineSpec.cr(3000, Decimal("250.00")))
        )

        assert info.seq == 1
        assert info.status == "posted"
        assert info.total_amount == Decimal("250.00")
        assert info.created_at == deterministic_clock.now()
        assert [line.account_code for line in info.lines] == [1010, 3000]
        assert journal.count() == 1

    def test_posting_time_stays_utc_after_reload(
        self, writer, journal, session, deterministic_clock
    ):
        info = writer.post_entry(
            _spec(LineSpec.dr(1010, Decimal("10.00")), LineSpec.cr(3000, Decimal("10.00")))
        )
        session.expire_all()

        reloaded = journal.get_entry(info.id)
        assert reloaded.created_at.tzinfo is not None
        assert reloaded.created_at == deterministic_clock.now()
        assert reloaded.created_at <= datetime.now(timezone.utc)

    def test_seq_increments_per_entry(self, writer):
        first = writer.post_entry(
            _spec(LineSpec.dr(1010, Decimal("10")), LineSpec.cr(3000, Decimal("10")))
        )
        second = writer.post_entry(
            _spec(LineSpec.dr(1010, Decimal("20")), LineSpec.cr(3000, Decimal("20")))
        )
        assert (first.seq, second.seq) == (1, 2)

    def test_amounts_are_rounded_to_cents(self, writer):
        info = writer.post_entry(
            _spec(LineSpec.dr(1010, Decimal("10.005")), LineSpec.cr(3000, Decimal("10.005")))
        )
        assert info.total_amount == Decimal("10.01")

    def test_logs_posted_entry(self, writer, captured_logs):
        writer.post_entry(
            _spec(LineSpec.dr(1010, Decimal("5")), LineSpec.cr(3000, Decimal("5")))
        )
        posted = [r for r in captured_logs() if r["message"] == "journal_entry_posted"]
        assert len(posted) == 1
        assert posted[0]["reference_id"] == "T-1"
        assert posted[0]["line_count"] == 2


class TestBalanceValidation:
    def test_unbalanced_entry_rejected_and_journal_unchanged(self, writer, journal):
        with pytest.raises(UnbalancedEntryError) as exc_info:
            writer.post_entry(
                _spec(LineSpec.dr(1010, Decimal("100")), LineSpec.cr(3000, Decimal("90")))
            )

        assert exc_info.value.debits == Decimal("100.00")
        assert exc_info.value.credits == Decimal("90.00")
        assert journal.count() == 0

    def test_difference_within_tolerance_is_accepted(self, writer):
        info = writer.post_entry(
            _spec(LineSpec.dr(1010, Decimal("100.00")), LineSpec.cr(3000, Decimal("99.96")))
        )
        assert info.total_amount == Decimal("100.00")

    def test_difference_at_tolerance_is_accepted(self, writer):
        writer.post_entry(
            _spec(LineSpec.dr(1010, Decimal("100.00")), LineSpec.cr(3000, Decimal("99.95")))
        )

    def test_difference_beyond_tolerance_is_rejected(self, writer):
        with pytest.raises(UnbalancedEntryError):
            writer.post_entry(
                _spec(LineSpec.dr(1010, Decimal("100.00")), LineSpec.cr(3000, Decimal("99.94")))
            )


class TestLineValidation:
    def test_entry_without_lines_rejected(self, writer):
        with pytest.raises(InvalidLineError):
            writer.post_entry(_spec())

    def test_zero_line_rejected(self, writer):
        with pytest.raises(InvalidLineError):
            writer.post_entry(
                _spec(
                    LineSpec.dr(1010, Decimal("10")),
                    LineSpec.cr(3000, Decimal("10")),
                    LineSpec(account_code=4000),
                )
            )

    def test_negative_amount_rejected_at_construction(self):
        with pytest.raises(InvalidLineError):
            LineSpec.dr(1010, Decimal("-1"))

    def test_unknown_account_rejected(self, writer, journal):
        with pytest.raises(AccountNotFoundError) as exc_info:
            writer.post_entry(
                _spec(LineSpec.dr(9999, Decimal("10")), LineSpec.cr(3000, Decimal("10")))
            )
        assert exc_info.value.account_code == 9999
        assert journal.count() == 0


class TestRecordAdjustment:
    def test_adjustment_posts_two_lines(self, orchestrator):
        info = orchestrator.record_adjustment(
            POSTING_DATE, "Owner capital", 1010, 3000, Decimal("5000")
        )

        assert info.reference_type == ReferenceType.ADJUSTMENT
        assert info.reference_id == "manual"
        assert info.lines_for(1010)[0].debit == Decimal("5000.00")
        assert info.lines_for(3000)[0].credit == Decimal("5000.00")
        assert orchestrator.ledger_selector.balance_of(3000) == Decimal("5000.00")

    def test_non_positive_adjustment_rejected(self, writer):
        with pytest.raises(InvalidLineError):
            writer.record_adjustment(POSTING_DATE, "Nothing", 1010, 3000, Decimal("0"))
