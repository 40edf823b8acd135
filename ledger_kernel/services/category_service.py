"""
CategoryService -- global and custom categories.

Responsibility:
    Lists the categories a user can see (the global set plus their own),
    manages custom categories, and seeds the global set.

Architecture position:
    Kernel > Services -- imperative shell, flush-only.

Invariants enforced:
    - (user, name, type) is unique among a user's custom categories; the
      global set is unique by (name, type).
    - Global categories are never renamed or deleted through this service.
    - A category referenced by any transaction is never deleted.

Failure modes:
    - DuplicateCategoryError, CategoryInUseError.
    - GlobalCategoryImmutableError, AuthorizationError,
      CategoryNotFoundError via OwnershipGuard.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import exists, or_, select

from ledger_kernel.exceptions import (
    CategoryInUseError,
    DuplicateCategoryError,
    ValidationError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.category import Category, CategoryType
from ledger_kernel.selectors.transaction_selector import TransactionSelector
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.ownership_guard import OwnershipGuard

logger = get_logger("services.category")

NAME_MAX_LENGTH = 100


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError({"name": "Category name is required"})
    if len(cleaned) > NAME_MAX_LENGTH:
        raise ValidationError(
            {"name": f"Category name must be at most {NAME_MAX_LENGTH} characters"}
        )
    return cleaned


class CategoryService(BaseService):
    """Category reads for a user and mutations of their own categories."""

    def __init__(self, session):
        super().__init__(session)
        self._guard = OwnershipGuard(session)

    def _exists(
        self, user_id: UUID | None, name: str, category_type: CategoryType
    ) -> bool:
        owner_clause = (
            Category.user_id.is_(None) if user_id is None else Category.user_id == user_id
        )
        return bool(
            self.session.scalar(
                select(
                    exists().where(
                        owner_clause,
                        Category.name == name,
                        Category.category_type == category_type,
                    )
                )
            )
        )

    def list_categories(
        self, acting_user_id: UUID, category_type: CategoryType | None = None
    ) -> list[Category]:
        """Global categories first, then the user's own, each by name."""
        stmt = select(Category).where(
            or_(Category.user_id.is_(None), Category.user_id == acting_user_id)
        )
        if category_type is not None:
            stmt = stmt.where(Category.category_type == category_type)
        stmt = stmt.order_by(Category.user_id.is_not(None), Category.name)
        return list(self.session.scalars(stmt))

    def get_category(self, category_id: UUID, acting_user_id: UUID) -> Category:
        return self._guard.require_category(category_id, acting_user_id)

    def create_category(
        self, acting_user_id: UUID, *, name: str, category_type: CategoryType
    ) -> Category:
        """
        Create a custom category.

        Raises:
            DuplicateCategoryError: Same (name, type) already owned by the user.
        """
        name = _clean_name(name)
        if self._exists(acting_user_id, name, category_type):
            raise DuplicateCategoryError(name, category_type.value)

        category = Category(
            name=name, category_type=category_type, user_id=acting_user_id
        )
        self.session.add(category)
        self.session.flush()
        logger.info(
            "category_created",
            extra={
                "category_id": str(category.id),
                "category_type": category_type.value,
            },
        )
        return category

    def update_category(
        self, category_id: UUID, acting_user_id: UUID, *, name: str
    ) -> Category:
        """Rename a custom category; the type never changes."""
        category = self._guard.require_owned_category(
            category_id, acting_user_id, action="modified"
        )
        name = _clean_name(name)
        if name != category.name and self._exists(
            acting_user_id, name, category.category_type
        ):
            raise DuplicateCategoryError(name, category.category_type.value)

        category.name = name
        self.session.flush()
        logger.info("category_updated", extra={"category_id": str(category.id)})
        return category

    def delete_category(self, category_id: UUID, acting_user_id: UUID) -> None:
        """
        Delete a custom category with no transactions.

        Global categories are rejected before usage is even checked.
        """
        category = self._guard.require_owned_category(
            category_id, acting_user_id, action="deleted"
        )
        if TransactionSelector(self.session).category_in_use(category.id):
            raise CategoryInUseError(category.id)

        self.session.delete(category)
        self.session.flush()
        logger.info("category_deleted", extra={"category_id": str(category_id)})

    def seed_global_categories(
        self, names: dict[str, Iterable[str]] | dict[CategoryType, Iterable[str]]
    ) -> list[Category]:
        """
        Insert any missing global categories.

        Args:
            names: Category type (enum or its name) -> category names.

        Returns:
            The categories created by this call (existing ones are skipped).
        """
        created: list[Category] = []
        for raw_type, type_names in names.items():
            category_type = CategoryType(raw_type)
            for raw_name in type_names:
                name = _clean_name(raw_name)
                if self._exists(None, name, category_type):
                    continue
                category = Category(name=name, category_type=category_type, user_id=None)
                self.session.add(category)
                created.append(category)
        self.session.flush()
        if created:
            logger.info(
                "global_categories_seeded",
                extra={"count": len(created)},
            )
        return created
