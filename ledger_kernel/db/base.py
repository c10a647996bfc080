"""
Module: ledger_kernel.db.base
Responsibility: Declarative bases shared by the kernel tables (accounts,
    journal entries and lines) and the sub-ledger tables (vendors, bills,
    invoices, expenses).
Architecture position: Kernel > DB.  Lowest import target in the kernel;
    MUST NOT import from models/, services/, selectors/ or outer layers.

Invariants enforced:
    - Every row is keyed by a uuid4 stored as a 36-character string, so the
      same schema runs on SQLite and server databases.
    - Decimal columns are Numeric(38, 9); money is never stored as float.
    - TrackedBase rows carry created_at / updated_at audit timestamps.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import BigInteger, Date, DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID values persisted as their canonical string form."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else PyUUID(value)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime normalised to UTC.

    SQLite keeps no offset, so values are stored as UTC and come back with
    ``timezone.utc`` attached.  Naive values are taken to be UTC already.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """
    Root of every ledger table.

    ``Mapped[...]`` annotations resolve through ``type_annotation_map``, so
    a model declaring ``amount: Mapped[Decimal]`` gets Numeric(38, 9) without
    naming the column type.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: UTCDateTime(),
        date: Date,
        PyUUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[PyUUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """Base for rows that record when they were written and last touched."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    # Audit metadata: allowed to change on posted journal rows
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )


UUID = PyUUID
