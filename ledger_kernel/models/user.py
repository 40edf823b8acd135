"""
Module: ledger_kernel.models.user
Responsibility: ORM persistence for registered users -- the owners of
    accounts and custom categories.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - email is unique and stored lower-cased (normalized by UserService).
    - password_hash is a bcrypt hash; the plaintext is never persisted.

Failure modes:
    - IntegrityError on duplicate email if the service-level check is raced.
"""

from typing import TYPE_CHECKING

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TimestampedBase

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account
    from ledger_kernel.models.category import Category


class User(TimestampedBase):
    """A person using the ledger."""

    __tablename__ = "users"

    __table_args__ = (UniqueConstraint("email", name="uq_user_email"),)

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)

    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    accounts: Mapped[list["Account"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    categories: Mapped[list["Category"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"
