"""
BalanceEngine -- the only code that moves an account balance.

Responsibility:
    Applies signed amounts to account balances and writes the matching
    transaction rows in the same flush unit, so the stored balance and the
    transaction history can never disagree.

Architecture position:
    Kernel > Services -- imperative shell, flush-only (see BaseService).
    Called by TransactionOrchestrator after validation and authorization.

Invariants enforced:
    - BALANCE_CONSISTENCY: balance change and row insert/delete are flushed
      together.
    - SIGN_BY_TYPE: INCOME > 0, EXPENSE < 0, checked before any mutation.
    - TRANSFER_PAIRING: transfers are posted only as a linked pair and never
      reversed leg by leg.
    - NO_LOST_UPDATES: account rows are locked in ascending id order
      (SELECT ... FOR UPDATE) and every UPDATE is guarded by the version
      column.

Failure modes:
    - InvalidAmountError: amount sign does not match the type, or a
      transfer amount that is not positive.
    - TransferTypeNotAllowedError: TRANSFER through post_single.
    - SameAccountTransferError: transfer from an account to itself.
    - TransferLegDeletionError: reverse_single on a transfer leg.
    - TransactionNotFoundError: the row was deleted by a concurrent writer
      between the caller's read and the account lock.
    - OptimisticLockError: an account row changed since it was read.

Audit relevance:
    Each posting logs ``balance_posted`` / ``transfer_posted`` /
    ``balance_reversed`` with the account ids, amounts and resulting
    balances.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm.exc import StaleDataError

from ledger_kernel.db.types import MONEY_PRECISION, MONEY_SCALE, ZERO, fits_money
from ledger_kernel.exceptions import (
    InvalidAmountError,
    OptimisticLockError,
    SameAccountTransferError,
    TransactionNotFoundError,
    TransferLegDeletionError,
    TransferTypeNotAllowedError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.models.transaction import PaymentMode, Transaction, TransactionType
from ledger_kernel.services.base import BaseService

logger = get_logger("services.balance")


@dataclass(frozen=True)
class TransferLegs:
    """The two rows of one transfer."""

    debit: Transaction
    credit: Transaction


def check_sign(transaction_type: TransactionType, amount: Decimal) -> None:
    """
    Reject an amount whose sign does not match its type.

    Raises:
        TransferTypeNotAllowedError: For TRANSFER.
        InvalidAmountError: For INCOME <= 0 or EXPENSE >= 0, or an amount
            the money column would round.
    """
    if not amount.is_finite():
        raise InvalidAmountError("amount", "Amount must be a finite number")
    check_scale(amount)
    if transaction_type == TransactionType.TRANSFER:
        raise TransferTypeNotAllowedError()
    if transaction_type == TransactionType.INCOME and amount <= ZERO:
        raise InvalidAmountError("amount", "Income amount must be positive")
    if transaction_type == TransactionType.EXPENSE and amount >= ZERO:
        raise InvalidAmountError("amount", "Expense amount must be negative")


def check_scale(amount: Decimal, field: str = "amount") -> None:
    """Reject an amount with more decimal places (or digits) than a balance holds."""
    if not fits_money(amount):
        raise InvalidAmountError(
            field,
            f"Amount must have at most {MONEY_PRECISION} digits, "
            f"{MONEY_SCALE} of them after the decimal point",
        )


class BalanceEngine(BaseService):
    """
    Posts and reverses balance effects.

    Contract:
        Callers pass accounts they have already authorized.  Every method
        flushes; none commits.

    Guarantees:
        - After any successful call, for every touched account,
          current_balance == opening_balance + sum(amount).
        - Validation failures leave the session untouched.

    Non-goals:
        - Ownership checks (OwnershipGuard) and id lookups.
        - Deleting a transfer pair.
    """

    def lock_accounts(self, *account_ids: UUID) -> dict[UUID, Account]:
        """
        Lock account rows in ascending id order and refresh them.

        Postconditions: the returned accounts reflect the committed state at
            lock time, not whatever the identity map held before.
        """
        ordered = sorted(set(account_ids), key=str)
        stmt = (
            select(Account)
            .where(Account.id.in_(ordered))
            .order_by(Account.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        locked = {account.id: account for account in self.session.scalars(stmt)}
        logger.debug(
            "accounts_locked",
            extra={"account_ids": [str(a) for a in ordered]},
        )
        return locked

    def post_single(
        self, account: Account, signed_amount: Decimal, transaction: Transaction
    ) -> Account:
        """
        Apply an INCOME or EXPENSE amount and persist its row.

        Args:
            account: Locked, authorized target account.
            signed_amount: Positive for INCOME, negative for EXPENSE.
            transaction: Unsaved row; its amount and account are set here.

        Returns:
            The updated account.
        """
        check_sign(transaction.transaction_type, signed_amount)

        transaction.account = account
        transaction.amount = signed_amount
        account.apply(signed_amount)
        self.session.add(transaction)
        self._flush(account)

        logger.info(
            "balance_posted",
            extra={
                "account_id": str(account.id),
                "transaction_id": str(transaction.id),
                "transaction_type": transaction.transaction_type.value,
                "amount": signed_amount,
                "balance": account.current_balance,
            },
        )
        return account

    def post_transfer_pair(
        self,
        from_account: Account,
        to_account: Account,
        amount: Decimal,
        *,
        transaction_date: datetime,
        payment_mode: PaymentMode,
        description: str | None = None,
    ) -> TransferLegs:
        """
        Move ``amount`` from one account to another as two linked rows.

        Raises:
            SameAccountTransferError: If both accounts are the same row.
            InvalidAmountError: If amount is not a positive finite number
                that fits the money column.
        """
        if from_account.id == to_account.id:
            raise SameAccountTransferError(from_account.id)
        if not amount.is_finite() or amount <= ZERO:
            raise InvalidAmountError("amount", "Transfer amount must be positive")
        check_scale(amount)

        debit = Transaction(
            account=from_account,
            amount=amount.copy_negate(),
            transaction_type=TransactionType.TRANSFER,
            description=description,
            transaction_date=transaction_date,
            payment_mode=payment_mode,
        )
        credit = Transaction(
            account=to_account,
            amount=amount,
            transaction_type=TransactionType.TRANSFER,
            description=description,
            transaction_date=transaction_date,
            payment_mode=payment_mode,
        )
        # Mutual reference; post_update issues the second UPDATE for us
        debit.related_transaction = credit
        credit.related_transaction = debit

        from_account.apply(amount.copy_negate())
        to_account.apply(amount)
        self.session.add_all([debit, credit])
        self._flush(from_account)

        logger.info(
            "transfer_posted",
            extra={
                "from_account_id": str(from_account.id),
                "to_account_id": str(to_account.id),
                "amount": amount,
                "debit_transaction_id": str(debit.id),
                "credit_transaction_id": str(credit.id),
                "from_balance": from_account.current_balance,
                "to_balance": to_account.current_balance,
            },
        )
        return TransferLegs(debit=debit, credit=credit)

    def reverse_single(self, transaction: Transaction) -> Account:
        """
        Undo a non-transfer transaction and delete its row.

        The account is locked first, then the row itself is re-read under
        lock: a row another writer already deleted is never reversed twice.
        Investment metadata goes with the row by cascade.

        Raises:
            TransferLegDeletionError: If the row is a transfer leg.
            TransactionNotFoundError: If the row no longer exists.
        """
        if transaction.is_transfer:
            raise TransferLegDeletionError(transaction.id)

        account = self.lock_accounts(transaction.account_id)[transaction.account_id]
        transaction = self._lock_transaction(transaction.id)
        amount = transaction.amount
        account.apply(amount.copy_negate())
        self.session.delete(transaction)
        self._flush(account)

        logger.info(
            "balance_reversed",
            extra={
                "account_id": str(account.id),
                "transaction_id": str(transaction.id),
                "amount": amount,
                "balance": account.current_balance,
            },
        )
        return account

    def _lock_transaction(self, transaction_id: UUID) -> Transaction:
        stmt = (
            select(Transaction)
            .where(Transaction.id == transaction_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        transaction = self.session.scalars(stmt).one_or_none()
        if transaction is None:
            logger.warning(
                "reversal_target_missing",
                extra={"transaction_id": str(transaction_id)},
            )
            raise TransactionNotFoundError(transaction_id)
        return transaction

    def _flush(self, account: Account) -> None:
        try:
            self.session.flush()
        except StaleDataError as exc:
            logger.warning(
                "optimistic_lock_conflict",
                extra={"account_id": str(account.id)},
            )
            raise OptimisticLockError("account", account.id) from exc
