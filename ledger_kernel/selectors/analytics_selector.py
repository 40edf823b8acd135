"""
Module: ledger_kernel.selectors.analytics_selector
Responsibility: Read-only financial summaries for one user: net worth,
    monthly income/expense totals, and per-category breakdowns.
Architecture position: Kernel > Selectors.  May import from db/, domain/,
    models/ and selectors/base.py.

Invariants enforced:
    - Read-only: no locks, no writes.
    - CREDIT balances count as liabilities at their absolute value; every
      other account type counts as an asset at its signed balance.
    - Expense totals are reported as positive magnitudes; income as-is.
    - Transfers never appear in income/expense figures.

Failure modes:
    - ValidationError from the period helpers (bad month, start > end).

Audit relevance:
    Totals are summed from the same rows the balances are derived from, in
    Decimal on the Python side so no backend rounds them, and a dashboard
    figure can always be traced back to transactions.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from ledger_kernel.db.types import LEDGER_DECIMAL, ZERO
from ledger_kernel.domain.periods import DateWindow, month_window, window
from ledger_kernel.models.account import Account, AccountType
from ledger_kernel.models.category import Category
from ledger_kernel.models.transaction import Transaction, TransactionType
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class AccountSummary:
    account_id: UUID
    account_name: str
    account_type: AccountType
    balance: Decimal


@dataclass(frozen=True)
class NetWorth:
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    accounts: tuple[AccountSummary, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MonthlySummary:
    year: int
    month: int
    total_income: Decimal
    total_expenses: Decimal
    net_savings: Decimal
    income_count: int
    expense_count: int


@dataclass(frozen=True)
class CategoryTotal:
    category_name: str
    amount: Decimal
    transaction_count: int


@dataclass(frozen=True)
class CategorySpending:
    expenses: tuple[CategoryTotal, ...]
    income: tuple[CategoryTotal, ...]


def _accumulate(rows) -> dict:
    """Exact (sum, count) per key over ``(key, amount)`` rows."""
    totals: dict = {}
    for key, amount in rows:
        total, count = totals.get(key, (ZERO, 0))
        totals[key] = (LEDGER_DECIMAL.add(total, amount), count + 1)
    return totals


class AnalyticsSelector(BaseSelector):
    """
    Dashboard aggregates for a single user.

    Contract:
        Month boundaries are computed in ``reporting_timezone`` and compared
        against stored UTC instants.
    """

    def __init__(self, session, reporting_timezone: str = "UTC"):
        super().__init__(session)
        self.reporting_timezone = reporting_timezone

    def net_worth(self, user_id: UUID) -> NetWorth:
        accounts = self.session.scalars(
            select(Account)
            .where(Account.user_id == user_id)
            .order_by(Account.created_at, Account.name)
        ).all()

        assets = ZERO
        liabilities = ZERO
        summaries = []
        for account in accounts:
            if account.is_liability:
                liabilities = LEDGER_DECIMAL.add(
                    liabilities, account.current_balance.copy_abs()
                )
            else:
                assets = LEDGER_DECIMAL.add(assets, account.current_balance)
            summaries.append(
                AccountSummary(
                    account_id=account.id,
                    account_name=account.name,
                    account_type=account.account_type,
                    balance=account.current_balance,
                )
            )

        return NetWorth(
            total_assets=assets,
            total_liabilities=liabilities,
            net_worth=LEDGER_DECIMAL.subtract(assets, liabilities),
            accounts=tuple(summaries),
        )

    def _totals_by_type(self, user_id: UUID, period: DateWindow) -> dict:
        stmt = (
            select(Transaction.transaction_type, Transaction.amount)
            .join(Account, Transaction.account_id == Account.id)
            .where(
                Account.user_id == user_id,
                Transaction.transaction_date.between(period.start, period.end),
                Transaction.transaction_type.in_(
                    [TransactionType.INCOME, TransactionType.EXPENSE]
                ),
            )
        )
        return _accumulate(self.session.execute(stmt))

    def monthly_summary(self, user_id: UUID, year: int, month: int) -> MonthlySummary:
        """Income and expense totals for one calendar month."""
        period = month_window(year, month, self.reporting_timezone)
        totals = self._totals_by_type(user_id, period)

        income, income_count = totals.get(TransactionType.INCOME, (ZERO, 0))
        expense_sum, expense_count = totals.get(TransactionType.EXPENSE, (ZERO, 0))
        expenses = expense_sum.copy_abs()

        return MonthlySummary(
            year=year,
            month=month,
            total_income=income,
            total_expenses=expenses,
            net_savings=LEDGER_DECIMAL.subtract(income, expenses),
            income_count=income_count,
            expense_count=expense_count,
        )

    def category_spending(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> CategorySpending:
        """
        Per-category totals over an inclusive range.

        Uncategorized rows are left out.  Each list is sorted by amount
        descending, then category name.
        """
        period = window(start, end)
        stmt = (
            select(Category.name, Transaction.transaction_type, Transaction.amount)
            .join(Account, Transaction.account_id == Account.id)
            .join(Category, Transaction.category_id == Category.id)
            .where(
                Account.user_id == user_id,
                Transaction.transaction_date.between(period.start, period.end),
                Transaction.transaction_type.in_(
                    [TransactionType.INCOME, TransactionType.EXPENSE]
                ),
            )
        )
        totals = _accumulate(
            ((name, row_type), amount)
            for name, row_type, amount in self.session.execute(stmt)
        )

        expenses: list[CategoryTotal] = []
        income: list[CategoryTotal] = []
        for (name, row_type), (total, count) in totals.items():
            if row_type == TransactionType.EXPENSE:
                expenses.append(CategoryTotal(name, total.copy_abs(), count))
            else:
                income.append(CategoryTotal(name, total, count))

        def _key(item: CategoryTotal):
            return (-item.amount, item.category_name)

        return CategorySpending(
            expenses=tuple(sorted(expenses, key=_key)),
            income=tuple(sorted(income, key=_key)),
        )
