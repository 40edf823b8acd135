"""Tests for CategoryService: global vs custom categories."""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from ledger_kernel.exceptions import (
    AuthorizationError,
    CategoryInUseError,
    CategoryNotFoundError,
    DuplicateCategoryError,
    GlobalCategoryImmutableError,
)
from ledger_kernel.models import Category, CategoryType
from ledger_kernel.models.transaction import PaymentMode, TransactionType
from ledger_kernel.services.category_service import CategoryService
from ledger_kernel.services.transaction_orchestrator import (
    NewTransaction,
    TransactionOrchestrator,
)


@pytest.fixture
def service(session):
    return CategoryService(session)


class TestListing:
    def test_globals_first_then_own(self, service, user, other_user, make_category):
        make_category("Utilities", CategoryType.EXPENSE)
        make_category("Books", CategoryType.EXPENSE, user)
        make_category("Aardvarks", CategoryType.EXPENSE, other_user)
        make_category("Bonus", CategoryType.INCOME)

        names = [c.name for c in service.list_categories(user.id)]
        assert names == ["Bonus", "Utilities", "Books"]

    def test_filter_by_type(self, service, user, salary, groceries):
        categories = service.list_categories(user.id, CategoryType.INCOME)
        assert [c.name for c in categories] == ["Salary"]

    def test_get_global_category(self, service, user, salary):
        assert service.get_category(salary.id, user.id).is_global

    def test_get_foreign_category(self, service, user, other_user, make_category):
        theirs = make_category("Hobby", CategoryType.EXPENSE, other_user)
        with pytest.raises(AuthorizationError):
            service.get_category(theirs.id, user.id)

    def test_get_unknown_category(self, service, user):
        with pytest.raises(CategoryNotFoundError):
            service.get_category(uuid4(), user.id)


class TestCustomCategories:
    def test_create(self, service, user):
        category = service.create_category(
            user.id, name="Pets", category_type=CategoryType.EXPENSE
        )
        assert category.user_id == user.id
        assert not category.is_global

    def test_same_name_different_type_allowed(self, service, user):
        service.create_category(user.id, name="Refunds", category_type=CategoryType.EXPENSE)
        category = service.create_category(
            user.id, name="Refunds", category_type=CategoryType.INCOME
        )
        assert category.category_type == CategoryType.INCOME

    def test_duplicate_rejected(self, service, user):
        service.create_category(user.id, name="Pets", category_type=CategoryType.EXPENSE)
        with pytest.raises(DuplicateCategoryError):
            service.create_category(user.id, name="Pets", category_type=CategoryType.EXPENSE)

    def test_may_shadow_global_name(self, service, user, groceries):
        category = service.create_category(
            user.id, name="Groceries", category_type=CategoryType.EXPENSE
        )
        assert category.id != groceries.id

    def test_rename(self, service, user):
        category = service.create_category(
            user.id, name="Pets", category_type=CategoryType.EXPENSE
        )
        assert service.update_category(category.id, user.id, name="Cats").name == "Cats"

    def test_delete_unused(self, service, session, user):
        category = service.create_category(
            user.id, name="Pets", category_type=CategoryType.EXPENSE
        )
        category_id = category.id
        service.delete_category(category_id, user.id)
        assert session.get(Category, category_id) is None

    def test_delete_in_use(self, service, session, user, checking):
        category = service.create_category(
            user.id, name="Pets", category_type=CategoryType.EXPENSE
        )
        TransactionOrchestrator(session).create_transaction(
            NewTransaction(
                account_id=checking.id,
                amount=Decimal("-30"),
                transaction_type=TransactionType.EXPENSE,
                transaction_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
                payment_mode=PaymentMode.CARD,
                category_id=category.id,
            ),
            user.id,
        )
        with pytest.raises(CategoryInUseError):
            service.delete_category(category.id, user.id)

    def test_foreign_category_cannot_be_renamed(
        self, service, user, other_user, make_category
    ):
        theirs = make_category("Hobby", CategoryType.EXPENSE, other_user)
        with pytest.raises(AuthorizationError):
            service.update_category(theirs.id, user.id, name="Mine now")


class TestGlobalCategories:
    def test_update_rejected(self, service, user, groceries):
        with pytest.raises(GlobalCategoryImmutableError) as exc_info:
            service.update_category(groceries.id, user.id, name="Food")
        assert exc_info.value.status == 403
        assert exc_info.value.title == "Cannot modify global category"
        assert groceries.name == "Groceries"

    def test_delete_rejected(self, service, user, groceries):
        with pytest.raises(GlobalCategoryImmutableError) as exc_info:
            service.delete_category(groceries.id, user.id)
        assert exc_info.value.title == "Cannot delete global category"

    def test_seed_is_idempotent(self, service, user):
        names = {"INCOME": ["Salary", "Interest"], CategoryType.EXPENSE: ["Rent"]}
        created = service.seed_global_categories(names)
        again = service.seed_global_categories(names)

        assert sorted(c.name for c in created) == ["Interest", "Rent", "Salary"]
        assert again == []
        assert all(c.is_global for c in service.list_categories(user.id))
