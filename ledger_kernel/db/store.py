"""
Module: ledger_kernel.db.store
Responsibility: Keyed collection access over a SQLAlchemy session.  One
    CollectionStore per ORM model gives sub-ledger services the get_all / get /
    add / update / upsert / delete surface they persist records through,
    without depending on the storage engine behind the session.
Architecture position: Kernel > DB.  May import from db/base.py only.

Invariants enforced:
    - Flush-only: the store never commits or rolls back; the caller owns the
      transaction boundary.
    - Journal entries are NOT written through a CollectionStore; the journal
      is append-only and only JournalWriter adds to it.
"""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class CollectionStore(Generic[ModelType]):
    """Durable keyed collection of one ORM model."""

    def __init__(self, session: Session, model: type[ModelType]):
        self.session = session
        self.model = model

    @property
    def name(self) -> str:
        return self.model.__tablename__

    def get_all(self, *order_by) -> list[ModelType]:
        query = select(self.model)
        if order_by:
            query = query.order_by(*order_by)
        return list(self.session.scalars(query).all())

    def get(self, record_id: UUID) -> ModelType | None:
        return self.session.get(self.model, record_id)

    def add(self, record: ModelType) -> ModelType:
        self.session.add(record)
        self.session.flush()
        return record

    def update(self, record_id: UUID, **values) -> ModelType | None:
        """Set ``values`` on an existing record; None when it does not exist."""
        record = self.get(record_id)
        if record is None:
            return None
        for field, value in values.items():
            setattr(record, field, value)
        self.session.flush()
        return record

    def upsert(self, record_id: UUID, **values) -> ModelType:
        """Update the record if it exists, otherwise insert it under ``record_id``."""
        record = self.update(record_id, **values)
        if record is None:
            record = self.add(self.model(id=record_id, **values))
        return record

    def delete(self, record_id: UUID) -> bool:
        record = self.get(record_id)
        if record is None:
            return False
        self.session.delete(record)
        self.session.flush()
        return True
