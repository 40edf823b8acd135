"""Tests for AccountService: opening balances, naming, ownership, deletion."""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from ledger_kernel.exceptions import (
    AccountInUseError,
    AccountNotFoundError,
    AuthorizationError,
    DuplicateAccountError,
    InvalidAmountError,
    ValidationError,
)
from ledger_kernel.models import Account, AccountType, CurrencyCode
from ledger_kernel.models.transaction import PaymentMode, TransactionType
from ledger_kernel.services.account_service import AccountService
from ledger_kernel.services.transaction_orchestrator import (
    NewTransaction,
    TransactionOrchestrator,
)


@pytest.fixture
def service(session):
    return AccountService(session)


class TestCreateAccount:
    def test_opening_balance_becomes_current_balance(self, service, user):
        account = service.create_account(
            user.id,
            name="  Joint Checking ",
            account_type=AccountType.CHECKING,
            currency=CurrencyCode.INR,
            initial_balance=Decimal("1200.50"),
        )

        assert account.name == "Joint Checking"
        assert account.current_balance == Decimal("1200.50")
        assert account.opening_balance == Decimal("1200.50")
        assert account.version == 1

    def test_default_balance_is_zero(self, service, user):
        account = service.create_account(
            user.id, name="Wallet", account_type=AccountType.CASH, currency=CurrencyCode.USD
        )
        assert account.current_balance == Decimal("0")

    def test_credit_account_opens_negative(self, service, user):
        account = service.create_account(
            user.id,
            name="Amex",
            account_type=AccountType.CREDIT,
            currency=CurrencyCode.USD,
            initial_balance=Decimal("-450"),
        )
        assert account.is_liability
        assert account.current_balance == Decimal("-450")

    def test_credit_account_cannot_open_positive(self, service, user):
        with pytest.raises(InvalidAmountError) as exc_info:
            service.create_account(
                user.id,
                name="Amex",
                account_type=AccountType.CREDIT,
                currency=CurrencyCode.USD,
                initial_balance=Decimal("10"),
            )
        assert exc_info.value.title == "Invalid balance for credit account"
        assert "initialBalance" in exc_info.value.errors

    @pytest.mark.parametrize(
        "account_type",
        [AccountType.CHECKING, AccountType.SAVINGS, AccountType.INVESTMENT, AccountType.CASH],
    )
    def test_asset_accounts_cannot_open_negative(self, service, user, account_type):
        with pytest.raises(InvalidAmountError):
            service.create_account(
                user.id,
                name="Negative",
                account_type=account_type,
                currency=CurrencyCode.USD,
                initial_balance=Decimal("-1"),
            )

    def test_opening_balance_beyond_money_scale_rejected(self, service, user):
        with pytest.raises(InvalidAmountError) as exc_info:
            service.create_account(
                user.id,
                name="Dust",
                account_type=AccountType.SAVINGS,
                currency=CurrencyCode.USD,
                initial_balance=Decimal("0.0000000001"),
            )
        assert set(exc_info.value.errors) == {"initialBalance"}

    def test_duplicate_name_for_same_user(self, service, user, checking):
        with pytest.raises(DuplicateAccountError):
            service.create_account(
                user.id, name="Checking", account_type=AccountType.SAVINGS,
                currency=CurrencyCode.USD,
            )

    def test_same_name_for_different_users(self, service, other_user, checking):
        account = service.create_account(
            other_user.id, name="Checking", account_type=AccountType.CHECKING,
            currency=CurrencyCode.USD,
        )
        assert account.user_id == other_user.id

    def test_blank_name(self, service, user):
        with pytest.raises(ValidationError):
            service.create_account(
                user.id, name="   ", account_type=AccountType.CASH, currency=CurrencyCode.USD
            )


class TestReadAndUpdate:
    def test_list_only_own_accounts(self, service, user, checking, savings, other_account):
        names = {a.name for a in service.list_accounts(user.id)}
        assert names == {"Checking", "Savings"}

    def test_list_by_type(self, service, user, checking, savings):
        accounts = service.list_accounts(user.id, AccountType.SAVINGS)
        assert [a.name for a in accounts] == ["Savings"]

    def test_get_foreign_account_denied(self, service, user, other_account):
        with pytest.raises(AuthorizationError):
            service.get_account(other_account.id, user.id)

    def test_get_unknown_account(self, service, user):
        with pytest.raises(AccountNotFoundError):
            service.get_account(uuid4(), user.id)

    def test_update_changes_name_and_currency_only(self, service, user, checking):
        updated = service.update_account(
            checking.id, user.id, name="Everyday", currency=CurrencyCode.EUR
        )
        assert updated.name == "Everyday"
        assert updated.currency == CurrencyCode.EUR
        assert updated.current_balance == Decimal("1000")
        assert updated.account_type == AccountType.CHECKING

    def test_update_to_existing_name(self, service, user, checking, savings):
        with pytest.raises(DuplicateAccountError):
            service.update_account(
                checking.id, user.id, name="Savings", currency=CurrencyCode.USD
            )

    def test_update_keeping_own_name(self, service, user, checking):
        updated = service.update_account(
            checking.id, user.id, name="Checking", currency=CurrencyCode.GBP
        )
        assert updated.currency == CurrencyCode.GBP


class TestDeleteAccount:
    def test_delete_empty_account(self, service, session, user, savings):
        account_id = savings.id
        service.delete_account(account_id, user.id)
        assert session.get(Account, account_id) is None

    def test_delete_account_with_history(self, service, session, user, checking):
        TransactionOrchestrator(session).create_transaction(
            NewTransaction(
                account_id=checking.id,
                amount=Decimal("10"),
                transaction_type=TransactionType.INCOME,
                transaction_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
                payment_mode=PaymentMode.CASH,
            ),
            user.id,
        )
        with pytest.raises(AccountInUseError):
            service.delete_account(checking.id, user.id)

    def test_delete_foreign_account(self, service, user, other_account):
        with pytest.raises(AuthorizationError):
            service.delete_account(other_account.id, user.id)
