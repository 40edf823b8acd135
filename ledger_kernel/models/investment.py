"""
Module: ledger_kernel.models.investment
Responsibility: Trade details attached one-to-one to an investment
    transaction.
Architecture position: Kernel > Models.  May import from db/base.py and
    db/types.py only.

Invariants enforced:
    - The row shares its primary key with its transaction (``id`` is a
      foreign key to transactions.id).
    - The owning transaction's amount == -(quantity * price_per_unit).

Failure modes:
    - None at this layer; quantity/price positivity is validated by the
      orchestrator before any row is built.
"""

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, synonym

from ledger_kernel.db.base import TimestampedBase, UUIDString
from ledger_kernel.db.types import LEDGER_DECIMAL, Price, Quantity

if TYPE_CHECKING:
    from ledger_kernel.models.transaction import Transaction


class AssetType(str, Enum):
    STOCK = "STOCK"
    MUTUAL_FUND = "MUTUAL_FUND"
    ETF = "ETF"
    BOND = "BOND"
    CRYPTO = "CRYPTO"


class InvestmentMetadata(TimestampedBase):
    """What was bought, how much of it, and at what unit price."""

    __tablename__ = "investment_metadata"

    id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("transactions.id", ondelete="CASCADE"),
        primary_key=True,
    )

    transaction_id = synonym("id")

    asset_symbol: Mapped[str] = mapped_column(String(50), nullable=False)

    asset_type: Mapped[AssetType] = mapped_column(
        SAEnum(AssetType, native_enum=False, length=20, validate_strings=True),
        nullable=False,
    )

    quantity: Mapped[Quantity] = mapped_column(nullable=False)

    price_per_unit: Mapped[Price] = mapped_column(nullable=False)

    transaction: Mapped["Transaction"] = relationship(
        back_populates="investment_metadata",
    )

    def __repr__(self) -> str:
        return f"<InvestmentMetadata {self.asset_symbol} x{self.quantity}>"

    @property
    def total_amount(self) -> Decimal:
        return LEDGER_DECIMAL.multiply(self.quantity, self.price_per_unit)
