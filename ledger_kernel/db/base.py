"""
Module: ledger_kernel.db.base
Responsibility: Declarative base for the ledger tables: string-stored UUID
    keys, Decimal and aware-datetime column defaults, and the created/updated
    stamps every ledger row carries.
Architecture position: Kernel > DB.  Imported by every model; imports
    only the column types from db.types.

Invariants enforced:
    - Every row is keyed by a uuid4 generated client side at flush, so
      post_update can link transfer legs without a RETURNING round trip.
    - Amounts are exact decimals (ExactDecimal), never Float.
    - Stamps are timezone-aware and written by the database clock.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from ledger_kernel.db.types import MONEY_PRECISION, MONEY_SCALE, ExactDecimal


class UUIDString(TypeDecorator):
    """UUID kept as its 36-character text form; identical on SQLite and PostgreSQL."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        Decimal: ExactDecimal(MONEY_PRECISION, MONEY_SCALE),
        datetime: DateTime(timezone=True),
        UUID: UUIDString(),
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TimestampedBase(Base):
    """
    Adds ``created_at`` (set once on INSERT) and ``updated_at`` (refreshed on
    every UPDATE, including balance postings).
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )
