"""
Module: ledger_kernel.models.transaction
Responsibility: ORM persistence for ledger transactions -- the history that
    every account balance is derived from.
Architecture position: Kernel > Models.  May import from db/base.py and
    db/types.py only.

Invariants enforced:
    - Sign follows type: INCOME > 0, EXPENSE < 0.  Transfer legs carry
      opposite signs and reference each other via related_transaction_id.
    - related_transaction_id is set only on TRANSFER rows.
    - InvestmentMetadata is owned by its transaction (delete-orphan).

Failure modes:
    - TransactionNotFoundError when a lookup by (id, user) misses.
    - TransferLegDeletionError when one leg of a transfer is deleted.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TimestampedBase, UUIDString
from ledger_kernel.db.types import Money

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account
    from ledger_kernel.models.category import Category
    from ledger_kernel.models.investment import InvestmentMetadata


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"


class PaymentMode(str, Enum):
    UPI = "UPI"
    CARD = "CARD"
    ACH = "ACH"
    CASH = "CASH"


class Transaction(TimestampedBase):
    """
    One signed movement of money on one account.

    Contract:
        ``amount`` is signed and is exactly what was added to the account's
        current_balance when the row was posted.

    Guarantees:
        - Transfer legs are created in pairs and linked both ways; the pair
          is inserted in one flush (post_update breaks the row cycle).
        - Deleting a transaction deletes its investment metadata.
    """

    __tablename__ = "transactions"

    __table_args__ = (
        Index("idx_transaction_account_date", "account_id", "transaction_date"),
        Index("idx_transaction_category", "category_id"),
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )

    category_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("categories.id"),
        nullable=True,
    )

    related_transaction_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("transactions.id", ondelete="SET NULL"),
        nullable=True,
    )

    amount: Mapped[Money] = mapped_column(nullable=False)

    transaction_type: Mapped[TransactionType] = mapped_column(
        SAEnum(TransactionType, native_enum=False, length=10, validate_strings=True),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    transaction_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    payment_mode: Mapped[PaymentMode] = mapped_column(
        SAEnum(PaymentMode, native_enum=False, length=10, validate_strings=True),
        nullable=False,
    )

    # Relationships
    account: Mapped["Account"] = relationship(back_populates="transactions")

    category: Mapped["Category | None"] = relationship(lazy="joined")

    related_transaction: Mapped["Transaction | None"] = relationship(
        remote_side="Transaction.id",
        foreign_keys=[related_transaction_id],
        post_update=True,
    )

    investment_metadata: Mapped["InvestmentMetadata | None"] = relationship(
        back_populates="transaction",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )

    def __repr__(self) -> str:
        return (
            f"<Transaction {self.transaction_type.value} {self.amount} "
            f"on {self.account_id}>"
        )

    @property
    def is_transfer(self) -> bool:
        return self.transaction_type == TransactionType.TRANSFER
