"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Common constructor and session-handling contract for every kernel
    service.  Services receive a SQLAlchemy ``Session`` and persist through
    ``session.flush()`` -- never ``session.commit()``.

Invariants enforced:
    Transaction boundaries: kernel services flush within the caller's
    transaction.  The caller (a module service, the PostingOrchestrator or a
    test) owns commit/rollback.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide read-only queries -- those live in selectors/.
    """

    def __init__(self, session: Session):
        self.session = session
