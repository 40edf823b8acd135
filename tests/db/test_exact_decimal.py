"""
Exact decimal columns: values written to SQLite come back digit for digit,
and the scale check agrees with what the column can hold.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import text

from ledger_kernel.db.types import fits_money, fits_quantity
from ledger_kernel.models.account import Account
from ledger_kernel.models.transaction import PaymentMode, Transaction, TransactionType
from ledger_kernel.selectors.analytics_selector import AnalyticsSelector
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.services.balance_engine import BalanceEngine

WHEN = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)

HUGE = Decimal("12345678901234567.89")


def _income(amount: str) -> tuple[Transaction, Decimal]:
    row = Transaction(
        transaction_type=TransactionType.INCOME,
        transaction_date=WHEN,
        payment_mode=PaymentMode.ACH,
    )
    return row, Decimal(amount)


class TestFitsScale:
    @pytest.mark.parametrize(
        "value", ["0", "-0.000000001", "1.100000000000", "9" * 29 + ".999999999"]
    )
    def test_money_fits(self, value):
        assert fits_money(Decimal(value))

    @pytest.mark.parametrize(
        "value", ["0.0000000001", "-1.0000000005", "1" * 30, "NaN", "Infinity"]
    )
    def test_money_does_not_fit(self, value):
        assert not fits_money(Decimal(value))

    def test_quantity_has_eighteen_places(self):
        assert fits_quantity(Decimal("0.000000000000000001"))
        assert not fits_quantity(Decimal("0.0000000000000000001"))


class TestRoundTrip:
    def test_balance_beyond_float_precision_survives(self, session, user, make_account):
        account = make_account(user, balance=HUGE)
        row, amount = _income("0.01")
        BalanceEngine(session).post_single(account, amount, row)
        session.flush()
        session.expire_all()

        reloaded = session.get(Account, account.id)
        assert reloaded.current_balance == Decimal("12345678901234567.90")
        assert reloaded.opening_balance == HUGE

    def test_stored_as_fixed_point_text(self, session, user, make_account):
        account = make_account(user, balance="-0.000000001")
        session.flush()

        raw = session.execute(
            text("SELECT current_balance FROM accounts WHERE id = :id"),
            {"id": str(account.id)},
        ).scalar_one()
        assert raw == "-0.000000001"

    def test_sums_are_exact(self, session, user, make_account):
        account = make_account(user, balance=HUGE)
        engine = BalanceEngine(session)
        for amount in ("0.01", "0.02", "0.000000001"):
            row, value = _income(amount)
            engine.post_single(account, value, row)
        session.flush()
        session.expire_all()

        (reconciliation,) = LedgerSelector(session).reconcile(user.id)
        assert reconciliation.computed_balance == Decimal("12345678901234567.920000001")
        assert reconciliation.is_consistent

        summary = AnalyticsSelector(session).monthly_summary(user.id, 2024, 3)
        assert summary.total_income == Decimal("0.030000001")
