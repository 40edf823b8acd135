"""Database layer - engine, base classes, types."""

from ledger_kernel.db.base import Base, TimestampedBase, UUIDString
from ledger_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    run_in_transaction,
    session_scope,
)
from ledger_kernel.db.types import ExactDecimal, Money, Price, Quantity

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "run_in_transaction",
    "create_tables",
    "Base",
    "TimestampedBase",
    "UUIDString",
    "ExactDecimal",
    "Money",
    "Quantity",
    "Price",
]
