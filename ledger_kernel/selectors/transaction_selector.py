"""
Module: ledger_kernel.selectors.transaction_selector
Responsibility: User-scoped read queries over transactions, plus the
    "is this row referenced" checks that guard account/category deletion.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Every listing joins through accounts and filters on the acting user,
      so a foreign id can never leak rows.
    - Listings are ordered by transaction_date descending (created_at
      descending breaks ties, newest first).

Failure modes:
    - None; a miss is returned as None or an empty list.
"""

from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.orm import selectinload

from ledger_kernel.domain.periods import DateWindow
from ledger_kernel.models.account import Account
from ledger_kernel.models.transaction import Transaction, TransactionType
from ledger_kernel.selectors.base import BaseSelector


class TransactionSelector(BaseSelector):
    """Read access to a user's transactions."""

    def _scoped(self, user_id: UUID):
        return (
            select(Transaction)
            .join(Account, Transaction.account_id == Account.id)
            .where(Account.user_id == user_id)
            .options(selectinload(Transaction.investment_metadata))
        )

    def _ordered(self, stmt) -> list[Transaction]:
        stmt = stmt.order_by(
            Transaction.transaction_date.desc(), Transaction.created_at.desc()
        )
        return list(self.session.scalars(stmt).unique())

    def for_user(self, user_id: UUID) -> list[Transaction]:
        return self._ordered(self._scoped(user_id))

    def by_id(self, transaction_id: UUID, user_id: UUID) -> Transaction | None:
        """The transaction if it exists and belongs to the user."""
        stmt = self._scoped(user_id).where(Transaction.id == transaction_id)
        return self.session.scalars(stmt).unique().one_or_none()

    def by_account(self, user_id: UUID, account_id: UUID) -> list[Transaction]:
        return self._ordered(
            self._scoped(user_id).where(Transaction.account_id == account_id)
        )

    def by_category(self, user_id: UUID, category_id: UUID) -> list[Transaction]:
        return self._ordered(
            self._scoped(user_id).where(Transaction.category_id == category_id)
        )

    def by_type(
        self, user_id: UUID, transaction_type: TransactionType
    ) -> list[Transaction]:
        return self._ordered(
            self._scoped(user_id).where(
                Transaction.transaction_type == transaction_type
            )
        )

    def in_window(self, user_id: UUID, window: DateWindow) -> list[Transaction]:
        """Transactions whose date falls in the inclusive window."""
        return self._ordered(
            self._scoped(user_id).where(
                Transaction.transaction_date.between(window.start, window.end)
            )
        )

    def account_has_transactions(self, account_id: UUID) -> bool:
        return bool(
            self.session.scalar(
                select(exists().where(Transaction.account_id == account_id))
            )
        )

    def category_in_use(self, category_id: UUID) -> bool:
        return bool(
            self.session.scalar(
                select(exists().where(Transaction.category_id == category_id))
            )
        )
