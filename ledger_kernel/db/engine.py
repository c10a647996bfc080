"""
Module: ledger_kernel.db.engine
Responsibility: The ledger's one engine and session factory, plus the
    commit-or-rollback scope used by scripts and tests.
Architecture position: Kernel > DB.  May import from db/base.py and
    db/immutability.py.  create_tables also imports every ORM module so the
    sub-ledger tables are registered on Base.metadata.

Invariants enforced:
    - SQLite connections leave transaction control to SQLAlchemy, so the
      SAVEPOINT around each event's postings works.
    - Immutability listeners are registered whenever an engine is built.
    - session_scope() commits on success and rolls back on any exception.

Failure modes:
    - RuntimeError when a session is requested before init_engine_from_url().
"""

import atexit
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ledger_kernel.db.immutability import register_immutability_listeners
from ledger_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Ledger database not initialized. Call init_engine_from_url() first."


def _configure_sqlite(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # pysqlite would otherwise open transactions itself and break SAVEPOINT
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def init_engine_from_url(database_url: str, echo: bool = False) -> Engine:
    """
    Build the ledger engine and session factory for ``database_url``.

    SQLite URLs share a single connection (StaticPool), so an in-memory
    database is visible to every session created afterwards.
    """
    global _engine, _session_factory

    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        _configure_sqlite(engine)
    else:
        engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

    _engine = engine
    _session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    register_immutability_listeners()

    configure_logging()
    logger.info("engine_initialized", extra={"dialect": engine.dialect.name})
    return engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session() -> Session:
    if _session_factory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _session_factory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Session that commits when the block succeeds.

    Usage:
        with session_scope() as session:
            orchestrator = build_posting_orchestrator(session)
            orchestrator.bootstrap()
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("session_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def _import_orm_modules() -> None:
    import ledger_kernel.models  # noqa: F401
    import ledger_modules.ap.orm  # noqa: F401
    import ledger_modules.ar.orm  # noqa: F401
    import ledger_modules.expense.orm  # noqa: F401


def create_tables() -> None:
    """Create the kernel and sub-ledger tables on the current engine."""
    from ledger_kernel.db.base import Base

    _import_orm_modules()
    Base.metadata.create_all(get_engine())
    logger.info("tables_created", extra={"table_count": len(Base.metadata.tables)})


def drop_tables() -> None:
    from ledger_kernel.db.base import Base

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory (test teardown)."""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


@atexit.register
def _dispose_on_exit() -> None:
    if _engine is not None:
        _engine.dispose()
