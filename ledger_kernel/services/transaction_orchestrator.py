"""
TransactionOrchestrator -- entry points for every ledger mutation.

Responsibility:
    Runs each posting through a fixed pipeline:

        Validate -> Authorize -> Compute -> Apply (BalanceEngine) -> Result

    and serves the user-scoped transaction reads.

Architecture position:
    Kernel > Services -- imperative shell.  Callers (the API, scripts,
    tests) own the unit of work; the orchestrator only flushes.

Invariants enforced:
    - OWNERSHIP: every account/category addressed by id passes through
      OwnershipGuard before it is read for mutation.
    - INVESTMENT_METADATA: a trade's amount is computed here as
      -(quantity * price_per_unit); clients never send it.
    - A failure before Apply performs no mutation.

Failure modes:
    - ValidationError family: bad amount/type/description, same-account
      transfer.
    - AccountNotFoundError / CategoryNotFoundError / AuthorizationError.
    - TransactionNotFoundError: delete/get of an id the user does not own.
    - InvalidAccountTypeError: trade on a non-INVESTMENT account.
    - TransferLegDeletionError: delete of a transfer leg.
    - OptimisticLockError: concurrent write to the same account.

Audit relevance:
    Logs ``transaction_created``, ``transfer_created``,
    ``investment_trade_created`` and ``transaction_deleted``.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.db.types import (
    LEDGER_DECIMAL,
    MONEY_SCALE,
    QUANTITY_SCALE,
    ZERO,
    fits_money,
    fits_quantity,
)
from ledger_kernel.domain.periods import to_utc, window
from ledger_kernel.exceptions import (
    InvalidAccountTypeError,
    InvalidAmountError,
    SameAccountTransferError,
    TransactionNotFoundError,
    ValidationError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import AccountType
from ledger_kernel.models.investment import AssetType, InvestmentMetadata
from ledger_kernel.models.transaction import PaymentMode, Transaction, TransactionType
from ledger_kernel.selectors.transaction_selector import TransactionSelector
from ledger_kernel.services.balance_engine import (
    BalanceEngine,
    TransferLegs,
    check_scale,
    check_sign,
)
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.ownership_guard import OwnershipGuard

logger = get_logger("services.orchestrator")

DESCRIPTION_MAX_LENGTH = 500
ASSET_SYMBOL_MAX_LENGTH = 50


@dataclass(frozen=True)
class NewTransaction:
    """An INCOME or EXPENSE to post."""

    account_id: UUID
    amount: Decimal
    transaction_type: TransactionType
    transaction_date: datetime
    payment_mode: PaymentMode
    category_id: UUID | None = None
    description: str | None = None


@dataclass(frozen=True)
class NewTransfer:
    from_account_id: UUID
    to_account_id: UUID
    amount: Decimal
    transaction_date: datetime
    payment_mode: PaymentMode
    description: str | None = None


@dataclass(frozen=True)
class NewInvestmentTrade:
    """A purchase on an INVESTMENT account; the amount is derived."""

    account_id: UUID
    asset_symbol: str
    asset_type: AssetType
    quantity: Decimal
    price_per_unit: Decimal
    transaction_date: datetime
    payment_mode: PaymentMode
    description: str | None = None


@dataclass(frozen=True)
class InvestmentTrade:
    transaction: Transaction
    metadata: InvestmentMetadata


def _check_description(description: str | None) -> None:
    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            {"description": f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters"}
        )


class TransactionOrchestrator(BaseService):
    """
    Coordinates validation, authorization and balance posting.

    Contract:
        Every public mutator either completes all of its writes (flushed,
        awaiting the caller's commit) or raises before the first one.

    Non-goals:
        - Transfer pair deletion.
        - Editing a posted transaction.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self._guard = OwnershipGuard(session)
        self._engine = BalanceEngine(session)
        self._selector = TransactionSelector(session)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_transaction(
        self, request: NewTransaction, acting_user_id: UUID
    ) -> Transaction:
        """Post a single INCOME or EXPENSE."""
        check_sign(request.transaction_type, request.amount)
        _check_description(request.description)

        self._guard.require_account(request.account_id, acting_user_id)
        category = None
        if request.category_id is not None:
            category = self._guard.require_category(request.category_id, acting_user_id)

        account = self._engine.lock_accounts(request.account_id)[request.account_id]
        transaction = Transaction(
            category=category,
            transaction_type=request.transaction_type,
            description=request.description,
            transaction_date=to_utc(request.transaction_date),
            payment_mode=request.payment_mode,
        )
        self._engine.post_single(account, request.amount, transaction)

        logger.info(
            "transaction_created",
            extra={
                "transaction_id": str(transaction.id),
                "account_id": str(account.id),
                "transaction_type": request.transaction_type.value,
                "amount": request.amount,
            },
        )
        return transaction

    def create_transfer(self, request: NewTransfer, acting_user_id: UUID) -> TransferLegs:
        """Move money between two of the user's accounts."""
        if not request.amount.is_finite() or request.amount <= ZERO:
            raise InvalidAmountError("amount", "Transfer amount must be positive")
        check_scale(request.amount)
        if request.from_account_id == request.to_account_id:
            raise SameAccountTransferError(request.from_account_id)
        _check_description(request.description)

        self._guard.require_account(request.from_account_id, acting_user_id)
        self._guard.require_account(request.to_account_id, acting_user_id)

        locked = self._engine.lock_accounts(
            request.from_account_id, request.to_account_id
        )
        legs = self._engine.post_transfer_pair(
            locked[request.from_account_id],
            locked[request.to_account_id],
            request.amount,
            transaction_date=to_utc(request.transaction_date),
            payment_mode=request.payment_mode,
            description=request.description,
        )

        logger.info(
            "transfer_created",
            extra={
                "debit_transaction_id": str(legs.debit.id),
                "credit_transaction_id": str(legs.credit.id),
                "amount": request.amount,
            },
        )
        return legs

    def create_investment_transaction(
        self, request: NewInvestmentTrade, acting_user_id: UUID
    ) -> InvestmentTrade:
        """Record a trade and its metadata as one EXPENSE."""
        errors: dict[str, str] = {}
        for field, label, value in (
            ("quantity", "Quantity", request.quantity),
            ("pricePerUnit", "Price per unit", request.price_per_unit),
        ):
            if not value.is_finite() or value <= ZERO:
                errors[field] = f"{label} must be positive"
            elif not fits_quantity(value):
                errors[field] = (
                    f"{label} must have at most {QUANTITY_SCALE} decimal places"
                )
        symbol = (request.asset_symbol or "").strip()
        if not symbol:
            errors["assetSymbol"] = "Asset symbol is required"
        elif len(symbol) > ASSET_SYMBOL_MAX_LENGTH:
            errors["assetSymbol"] = (
                f"Asset symbol must be at most {ASSET_SYMBOL_MAX_LENGTH} characters"
            )
        if errors:
            raise ValidationError(errors)

        # The posted amount must equal -(quantity * price) exactly
        total = LEDGER_DECIMAL.multiply(request.quantity, request.price_per_unit)
        if not fits_money(total):
            raise ValidationError(
                {
                    "pricePerUnit": (
                        f"Quantity times price per unit must have at most "
                        f"{MONEY_SCALE} decimal places"
                    )
                }
            )
        _check_description(request.description)

        account = self._guard.require_account(request.account_id, acting_user_id)
        if account.account_type != AccountType.INVESTMENT:
            raise InvalidAccountTypeError(
                account.id, account.account_type.value, AccountType.INVESTMENT.value
            )

        account = self._engine.lock_accounts(account.id)[account.id]
        transaction = Transaction(
            transaction_type=TransactionType.EXPENSE,
            description=request.description,
            transaction_date=to_utc(request.transaction_date),
            payment_mode=request.payment_mode,
        )
        transaction.investment_metadata = InvestmentMetadata(
            asset_symbol=symbol,
            asset_type=request.asset_type,
            quantity=request.quantity,
            price_per_unit=request.price_per_unit,
        )
        self._engine.post_single(account, total.copy_negate(), transaction)

        logger.info(
            "investment_trade_created",
            extra={
                "transaction_id": str(transaction.id),
                "account_id": str(account.id),
                "asset_symbol": symbol,
                "asset_type": request.asset_type.value,
                "total_amount": total,
            },
        )
        return InvestmentTrade(
            transaction=transaction, metadata=transaction.investment_metadata
        )

    def delete_transaction(self, transaction_id: UUID, acting_user_id: UUID) -> None:
        """
        Reverse a transaction's balance effect and delete it.

        Raises:
            TransactionNotFoundError: Unknown id or not the user's.
            TransferLegDeletionError: The row is a transfer leg.
        """
        transaction = self._selector.by_id(transaction_id, acting_user_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)

        self._engine.reverse_single(transaction)
        logger.info(
            "transaction_deleted",
            extra={"transaction_id": str(transaction_id)},
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_all(self, acting_user_id: UUID) -> list[Transaction]:
        return self._selector.for_user(acting_user_id)

    def get_by_id(self, transaction_id: UUID, acting_user_id: UUID) -> Transaction:
        transaction = self._selector.by_id(transaction_id, acting_user_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        return transaction

    def get_filtered(
        self,
        acting_user_id: UUID,
        *,
        account_id: UUID | None = None,
        category_id: UUID | None = None,
        transaction_type: TransactionType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Transaction]:
        """
        Apply the first applicable filter, in precedence order:
        date range (both bounds) > category > type > account.
        """
        if start is not None and end is not None:
            return self._selector.in_window(acting_user_id, window(start, end))
        if category_id is not None:
            return self._selector.by_category(acting_user_id, category_id)
        if transaction_type is not None:
            return self._selector.by_type(acting_user_id, transaction_type)
        if account_id is not None:
            self._guard.require_account(account_id, acting_user_id)
            return self._selector.by_account(acting_user_id, account_id)
        return self.get_all(acting_user_id)
