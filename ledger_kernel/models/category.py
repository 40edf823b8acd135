"""
Module: ledger_kernel.models.category
Responsibility: ORM persistence for transaction categories, both the shared
    global set and each user's custom ones.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/scope.py only.

Invariants enforced:
    - (user_id, name, category_type) is unique.  Global rows (user_id NULL)
      are de-duplicated by CategoryService.seed_global_categories, since a
      NULL column never collides in a unique index.
    - Global categories are read-only for every user.

Failure modes:
    - CategoryNotFoundError for an unknown id.
    - GlobalCategoryImmutableError on update/delete of a global row.
"""

from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TimestampedBase, UUIDString
from ledger_kernel.domain.scope import Scope, scope_for

if TYPE_CHECKING:
    from ledger_kernel.models.user import User


class CategoryType(str, Enum):
    """Which side of the ledger a category classifies."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Category(TimestampedBase):
    """
    A label for transactions.

    Contract:
        user_id NULL means the category is global: visible to everyone and
        mutable by no one.  Callers branch on ``scope`` rather than on the
        raw column.
    """

    __tablename__ = "categories"

    __table_args__ = (
        UniqueConstraint(
            "user_id", "name", "category_type", name="uq_category_user_name_type"
        ),
        Index("idx_category_user", "user_id"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    category_type: Mapped[CategoryType] = mapped_column(
        SAEnum(CategoryType, native_enum=False, length=10, validate_strings=True),
        nullable=False,
    )

    user_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
    )

    user: Mapped["User | None"] = relationship(back_populates="categories")

    def __repr__(self) -> str:
        owner = "global" if self.user_id is None else str(self.user_id)
        return f"<Category {self.name} ({self.category_type.value}, {owner})>"

    @property
    def scope(self) -> Scope:
        return scope_for(self.user_id)

    @property
    def is_global(self) -> bool:
        return self.user_id is None
