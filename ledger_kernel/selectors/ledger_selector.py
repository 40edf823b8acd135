"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Balance reconciliation -- recomputes every account's balance
    from its opening balance and transaction history and compares it with
    the stored running balance.
Architecture position: Kernel > Selectors.  May import from models/ and
    selectors/base.py.

Invariants enforced:
    BALANCE_CONSISTENCY -- reconcile() is the check: for every account,
        current_balance == opening_balance + sum(amount).

Failure modes:
    - None; drift is reported, never raised.

Audit relevance:
    The stored balance is a cache.  reconcile() is how an operator (or a
    test after every mutation) proves the cache still matches history.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from ledger_kernel.db.types import LEDGER_DECIMAL, ZERO
from ledger_kernel.models.account import Account
from ledger_kernel.models.transaction import Transaction
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class AccountReconciliation:
    """Stored vs recomputed balance for one account."""

    account_id: UUID
    account_name: str
    stored_balance: Decimal
    computed_balance: Decimal
    transaction_count: int

    @property
    def drift(self) -> Decimal:
        return LEDGER_DECIMAL.subtract(self.stored_balance, self.computed_balance)

    @property
    def is_consistent(self) -> bool:
        return self.drift == ZERO


class LedgerSelector(BaseSelector):
    """
    Reconciliation queries.

    Non-goals:
        - Repairing drift.  A drifted account is a bug to investigate, not
          a number to overwrite.
    """

    def posted_totals(self, user_id: UUID) -> dict[UUID, tuple[Decimal, int]]:
        """Sum and count of transaction amounts per account of the user."""
        stmt = (
            select(Transaction.account_id, Transaction.amount)
            .join(Account, Transaction.account_id == Account.id)
            .where(Account.user_id == user_id)
        )
        totals: dict[UUID, tuple[Decimal, int]] = {}
        for account_id, amount in self.session.execute(stmt):
            total, count = totals.get(account_id, (ZERO, 0))
            totals[account_id] = (LEDGER_DECIMAL.add(total, amount), count + 1)
        return totals

    def reconcile(self, user_id: UUID) -> list[AccountReconciliation]:
        """One row per account, ordered by name."""
        totals = self.posted_totals(user_id)
        accounts = self.session.scalars(
            select(Account).where(Account.user_id == user_id).order_by(Account.name)
        )
        rows = []
        for account in accounts:
            posted, count = totals.get(account.id, (ZERO, 0))
            rows.append(
                AccountReconciliation(
                    account_id=account.id,
                    account_name=account.name,
                    stored_balance=account.current_balance,
                    computed_balance=LEDGER_DECIMAL.add(account.opening_balance, posted),
                    transaction_count=count,
                )
            )
        return rows

    def drifted(self, user_id: UUID) -> list[AccountReconciliation]:
        """Only the accounts whose stored balance disagrees with history."""
        return [row for row in self.reconcile(user_id) if not row.is_consistent]
