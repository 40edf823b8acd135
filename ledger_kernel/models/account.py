"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for user accounts and their running balance.
Architecture position: Kernel > Models.  May import from db/base.py and
    db/types.py only.

Invariants enforced:
    - current_balance == opening_balance + sum(amount) over the account's
      transactions.  Only BalanceEngine mutates current_balance.
    - name is unique per user (uq_account_user_name).
    - version is bumped by the ORM on every UPDATE (version_id_col); a
      write based on a stale read raises StaleDataError.

Failure modes:
    - AccountNotFoundError when an operation references an unknown id.
    - AccountInUseError when deletion is attempted on an account with
      transactions.
"""

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TimestampedBase, UUIDString
from ledger_kernel.db.types import LEDGER_DECIMAL, Money

if TYPE_CHECKING:
    from ledger_kernel.models.transaction import Transaction
    from ledger_kernel.models.user import User


class AccountType(str, Enum):
    """Kinds of account a user can hold."""

    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"
    CREDIT = "CREDIT"
    INVESTMENT = "INVESTMENT"
    CASH = "CASH"


class CurrencyCode(str, Enum):
    """Supported account currencies."""

    USD = "USD"
    INR = "INR"
    EUR = "EUR"
    GBP = "GBP"


class Account(TimestampedBase):
    """
    A user-owned account with a running balance.

    Contract:
        current_balance is a cache of opening_balance plus the signed sum of
        the account's transactions.  It is mutated under a row lock by
        BalanceEngine and nowhere else.

    Guarantees:
        - account_type is one of CHECKING, SAVINGS, CREDIT, INVESTMENT, CASH.
        - A CREDIT account never opens with a positive balance.

    Non-goals:
        - Currency conversion.  Balances are per-account, in the account's
          own currency; cross-account totals assume a single currency.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_account_user_name"),
        Index("idx_account_user", "user_id"),
    )

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(AccountType, native_enum=False, length=20, validate_strings=True),
        nullable=False,
    )

    currency: Mapped[CurrencyCode] = mapped_column(
        SAEnum(CurrencyCode, native_enum=False, length=3, validate_strings=True),
        nullable=False,
    )

    # Balance at creation; reconcile() measures drift against it
    opening_balance: Mapped[Money] = mapped_column(nullable=False)

    current_balance: Mapped[Money] = mapped_column(nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    user: Mapped["User"] = relationship(back_populates="accounts")

    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Account {self.name}: {self.account_type.value} {self.current_balance}>"

    @property
    def is_liability(self) -> bool:
        """CREDIT balances count against net worth."""
        return self.account_type == AccountType.CREDIT

    def apply(self, signed_amount: Decimal) -> None:
        """Move the running balance by ``signed_amount``."""
        self.current_balance = LEDGER_DECIMAL.add(self.current_balance, signed_amount)
