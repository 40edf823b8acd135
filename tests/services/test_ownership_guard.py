"""Tests for the ownership guard and the pure authorize() decision."""

from uuid import uuid4

import pytest

from ledger_kernel.domain.scope import GlobalScope, OwnedScope
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    AuthorizationError,
    GlobalCategoryImmutableError,
)
from ledger_kernel.models import CategoryType
from ledger_kernel.services.ownership_guard import Decision, OwnershipGuard, authorize


class TestAuthorize:
    def test_global_scope_allows_anyone(self):
        assert authorize(GlobalScope(), uuid4()) is Decision.ALLOWED

    def test_owner_allowed(self):
        owner = uuid4()
        assert authorize(OwnedScope(owner), owner) is Decision.ALLOWED

    def test_non_owner_denied(self):
        assert authorize(OwnedScope(uuid4()), uuid4()) is Decision.DENIED

    def test_unknown_scope(self):
        with pytest.raises(TypeError):
            authorize(object(), uuid4())


class TestOwnershipGuard:
    @pytest.fixture
    def guard(self, session):
        return OwnershipGuard(session)

    def test_own_account(self, guard, user, checking):
        assert guard.require_account(checking.id, user.id) is checking

    def test_foreign_account_logged_and_denied(
        self, guard, user, other_account, captured_logs
    ):
        with pytest.raises(AuthorizationError) as exc_info:
            guard.require_account(other_account.id, user.id)

        assert exc_info.value.status == 403
        denied = [r for r in captured_logs() if r["message"] == "authorization_denied"]
        assert denied[0]["resource_type"] == "account"
        assert denied[0]["acting_user_id"] == str(user.id)

    def test_missing_account(self, guard, user):
        with pytest.raises(AccountNotFoundError):
            guard.require_account(uuid4(), user.id)

    def test_global_category_readable(self, guard, user, salary):
        assert guard.require_category(salary.id, user.id) is salary

    def test_global_category_not_mutable(self, guard, user, salary):
        with pytest.raises(GlobalCategoryImmutableError):
            guard.require_owned_category(salary.id, user.id)

    def test_own_category_mutable(self, guard, user, make_category):
        mine = make_category("Pets", CategoryType.EXPENSE, user)
        assert guard.require_owned_category(mine.id, user.id) is mine
