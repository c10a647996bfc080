"""
Pytest fixtures for the ledger test suite.

Provides:
- Structured logging configured once per run, plus a log capture fixture
- A fresh in-memory SQLite database per test
- Deterministic clock and the bundled configuration
- A bootstrapped PostingOrchestrator (chart of accounts and vendors seeded)
"""

import json
import logging
from collections.abc import Callable, Generator
from datetime import date, datetime, timezone
from io import StringIO

import pytest
from sqlalchemy.orm import Session

from ledger_config import LedgerConfig, get_active_config
from ledger_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_services import PostingOrchestrator

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"

# Matches the DeterministicClock default below
TODAY = date(2024, 1, 15)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, orchestrator):
            orchestrator.sales.record_order(...)
            logs = captured_logs()
            assert any(r["message"] == "event_posted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory database with every table created."""
    eng = init_engine_from_url(TEST_DATABASE_URL)
    create_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


# =============================================================================
# Time and configuration
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def ledger_config() -> LedgerConfig:
    return get_active_config()


# =============================================================================
# Orchestrator
# =============================================================================


@pytest.fixture
def make_orchestrator(
    session, ledger_config, deterministic_clock
) -> Callable[..., PostingOrchestrator]:
    """
    Factory for bootstrapped orchestrators sharing the test session.

    Keyword arguments override the configuration (``lock_date``) or the
    orchestrator's collaborators (``order_source``).
    """

    def _make(lock_date: date | None = None, order_source=None) -> PostingOrchestrator:
        config = ledger_config.with_lock_date(lock_date)
        orchestrator = PostingOrchestrator(
            session,
            config,
            clock=deterministic_clock,
            order_source=order_source,
        )
        orchestrator.bootstrap()
        return orchestrator

    return _make


@pytest.fixture
def orchestrator(make_orchestrator) -> PostingOrchestrator:
    return make_orchestrator()
