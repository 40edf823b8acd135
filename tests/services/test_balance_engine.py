"""
Tests for BalanceEngine: sign rules, single postings, transfer pairs and
reversal.  Every mutation is checked against the account's stored
balance.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import delete, update

from ledger_kernel.exceptions import (
    InvalidAmountError,
    SameAccountTransferError,
    TransactionNotFoundError,
    TransferLegDeletionError,
    TransferTypeNotAllowedError,
)
from ledger_kernel.models.account import Account
from ledger_kernel.models.transaction import PaymentMode, Transaction, TransactionType
from ledger_kernel.services.balance_engine import BalanceEngine, check_sign

WHEN = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine(session):
    return BalanceEngine(session)


def _row(transaction_type: TransactionType) -> Transaction:
    return Transaction(
        transaction_type=transaction_type,
        transaction_date=WHEN,
        payment_mode=PaymentMode.CARD,
    )


class TestCheckSign:
    def test_positive_income_accepted(self):
        check_sign(TransactionType.INCOME, Decimal("0.01"))

    def test_negative_expense_accepted(self):
        check_sign(TransactionType.EXPENSE, Decimal("-0.01"))

    @pytest.mark.parametrize("amount", ["0", "-5"])
    def test_income_must_be_positive(self, amount):
        with pytest.raises(InvalidAmountError) as exc_info:
            check_sign(TransactionType.INCOME, Decimal(amount))
        assert exc_info.value.errors == {"amount": "Income amount must be positive"}

    @pytest.mark.parametrize("amount", ["0", "5"])
    def test_expense_must_be_negative(self, amount):
        with pytest.raises(InvalidAmountError) as exc_info:
            check_sign(TransactionType.EXPENSE, Decimal(amount))
        assert exc_info.value.errors == {"amount": "Expense amount must be negative"}

    def test_transfer_rejected(self):
        with pytest.raises(TransferTypeNotAllowedError):
            check_sign(TransactionType.TRANSFER, Decimal("10"))

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_rejected(self, amount):
        with pytest.raises(InvalidAmountError):
            check_sign(TransactionType.INCOME, Decimal(amount))

    @pytest.mark.parametrize(
        "transaction_type, amount",
        [
            (TransactionType.EXPENSE, "-0.0000000001"),
            (TransactionType.INCOME, "0.0000000001"),
            (TransactionType.INCOME, "10.1234567891"),
            (TransactionType.INCOME, "1" * 30),
        ],
    )
    def test_amount_the_column_would_round_rejected(self, transaction_type, amount):
        with pytest.raises(InvalidAmountError) as exc_info:
            check_sign(transaction_type, Decimal(amount))
        assert set(exc_info.value.errors) == {"amount"}

    def test_nine_places_and_trailing_zeros_accepted(self):
        check_sign(TransactionType.EXPENSE, Decimal("-0.000000001"))
        check_sign(TransactionType.INCOME, Decimal("12.500000000000"))


class TestPostSingle:
    def test_income_increases_balance(self, engine, checking):
        engine.post_single(checking, Decimal("250.75"), _row(TransactionType.INCOME))
        assert checking.current_balance == Decimal("1250.75")

    def test_expense_decreases_balance(self, engine, checking):
        row = _row(TransactionType.EXPENSE)
        engine.post_single(checking, Decimal("-40.10"), row)

        assert checking.current_balance == Decimal("959.90")
        assert row.account_id == checking.id
        assert row.amount == Decimal("-40.10")

    def test_rejected_sign_leaves_balance_untouched(self, engine, checking):
        with pytest.raises(InvalidAmountError):
            engine.post_single(checking, Decimal("40"), _row(TransactionType.EXPENSE))
        assert checking.current_balance == Decimal("1000")

    def test_posting_bumps_version(self, engine, checking):
        before = checking.version
        engine.post_single(checking, Decimal("1"), _row(TransactionType.INCOME))
        assert checking.version == before + 1

    def test_logs_balance_posted(self, engine, checking, captured_logs):
        engine.post_single(checking, Decimal("5"), _row(TransactionType.INCOME))
        posted = [r for r in captured_logs() if r["message"] == "balance_posted"]
        assert len(posted) == 1
        assert posted[0]["account_id"] == str(checking.id)
        assert posted[0]["balance"] == "1005"


class TestTransferPair:
    def test_moves_money_between_accounts(self, engine, checking, savings):
        legs = engine.post_transfer_pair(
            checking, savings, Decimal("300"),
            transaction_date=WHEN, payment_mode=PaymentMode.ACH,
        )

        assert checking.current_balance == Decimal("700")
        assert savings.current_balance == Decimal("800")
        assert legs.debit.amount == Decimal("-300")
        assert legs.credit.amount == Decimal("300")

    def test_legs_reference_each_other(self, engine, session, checking, savings):
        legs = engine.post_transfer_pair(
            checking, savings, Decimal("10"),
            transaction_date=WHEN, payment_mode=PaymentMode.ACH, description="Move",
        )
        session.expire_all()

        debit = session.get(Transaction, legs.debit.id)
        credit = session.get(Transaction, legs.credit.id)
        assert debit.related_transaction_id == credit.id
        assert credit.related_transaction_id == debit.id
        assert debit.transaction_type == TransactionType.TRANSFER
        assert credit.description == "Move"

    def test_same_account_rejected(self, engine, checking):
        with pytest.raises(SameAccountTransferError):
            engine.post_transfer_pair(
                checking, checking, Decimal("10"),
                transaction_date=WHEN, payment_mode=PaymentMode.ACH,
            )

    @pytest.mark.parametrize("amount", ["0", "-1"])
    def test_non_positive_amount_rejected(self, engine, checking, savings, amount):
        with pytest.raises(InvalidAmountError):
            engine.post_transfer_pair(
                checking, savings, Decimal(amount),
                transaction_date=WHEN, payment_mode=PaymentMode.ACH,
            )
        assert checking.current_balance == Decimal("1000")

    def test_sub_scale_amount_rejected(self, engine, checking, savings):
        with pytest.raises(InvalidAmountError):
            engine.post_transfer_pair(
                checking, savings, Decimal("0.0000000001"),
                transaction_date=WHEN, payment_mode=PaymentMode.ACH,
            )
        assert checking.current_balance == Decimal("1000")

    def test_transfer_can_overdraw(self, engine, checking, savings):
        engine.post_transfer_pair(
            checking, savings, Decimal("1500"),
            transaction_date=WHEN, payment_mode=PaymentMode.ACH,
        )
        assert checking.current_balance == Decimal("-500")


class TestReverseSingle:
    def test_reverse_restores_balance_and_deletes_row(self, engine, session, checking):
        row = _row(TransactionType.EXPENSE)
        engine.post_single(checking, Decimal("-80"), row)
        row_id = row.id

        account = engine.reverse_single(row)

        assert account.current_balance == Decimal("1000")
        assert session.get(Transaction, row_id) is None

    def test_transfer_leg_rejected(self, engine, checking, savings):
        legs = engine.post_transfer_pair(
            checking, savings, Decimal("10"),
            transaction_date=WHEN, payment_mode=PaymentMode.ACH,
        )
        with pytest.raises(TransferLegDeletionError):
            engine.reverse_single(legs.debit)
        assert checking.current_balance == Decimal("990")

    def test_row_already_deleted_is_not_reversed_again(self, engine, session, checking):
        row = _row(TransactionType.EXPENSE)
        engine.post_single(checking, Decimal("-40"), row)

        # A concurrent delete committed first: row gone, balance restored.
        # This session still holds the row it read before.
        session.execute(
            delete(Transaction)
            .where(Transaction.id == row.id)
            .execution_options(synchronize_session=False)
        )
        session.execute(
            update(Account)
            .where(Account.id == checking.id)
            .values(current_balance=Decimal("1000"), version=Account.version + 1)
            .execution_options(synchronize_session=False)
        )

        with pytest.raises(TransactionNotFoundError):
            engine.reverse_single(row)

        assert checking.current_balance == Decimal("1000")
        session.flush()
        session.expire_all()
        assert session.get(Account, checking.id).current_balance == Decimal("1000")


class TestLockAccounts:
    def test_returns_every_requested_account(self, engine, checking, savings):
        locked = engine.lock_accounts(savings.id, checking.id)
        assert set(locked) == {checking.id, savings.id}

    def test_duplicate_ids_collapse(self, engine, checking):
        assert list(engine.lock_accounts(checking.id, checking.id)) == [checking.id]
