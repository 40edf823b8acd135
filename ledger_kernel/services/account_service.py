"""
AccountService -- account lifecycle.

Responsibility:
    Opens, renames, lists and closes a user's accounts.  Balances are only
    ever set here at creation; afterwards BalanceEngine owns them.

Architecture position:
    Kernel > Services -- imperative shell, flush-only.

Invariants enforced:
    - Account names are unique per user.
    - CREDIT accounts open at zero or below; every other type at zero or
      above.
    - An account with transactions is never deleted.

Failure modes:
    - DuplicateAccountError, InvalidAmountError, AccountInUseError.
    - AccountNotFoundError / AuthorizationError via OwnershipGuard.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import exists, select

from ledger_kernel.db.types import ZERO
from ledger_kernel.exceptions import (
    AccountInUseError,
    DuplicateAccountError,
    InvalidAmountError,
    ValidationError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account, AccountType, CurrencyCode
from ledger_kernel.selectors.transaction_selector import TransactionSelector
from ledger_kernel.services.balance_engine import check_scale
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.ownership_guard import OwnershipGuard

logger = get_logger("services.account")

NAME_MAX_LENGTH = 100


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError({"name": "Account name is required"})
    if len(cleaned) > NAME_MAX_LENGTH:
        raise ValidationError(
            {"name": f"Account name must be at most {NAME_MAX_LENGTH} characters"}
        )
    return cleaned


class AccountService(BaseService):
    """Create/read/update/delete for accounts the acting user owns."""

    def __init__(self, session):
        super().__init__(session)
        self._guard = OwnershipGuard(session)

    def _name_taken(self, user_id: UUID, name: str) -> bool:
        return bool(
            self.session.scalar(
                select(
                    exists().where(Account.user_id == user_id, Account.name == name)
                )
            )
        )

    def create_account(
        self,
        acting_user_id: UUID,
        *,
        name: str,
        account_type: AccountType,
        currency: CurrencyCode,
        initial_balance: Decimal = ZERO,
    ) -> Account:
        """
        Open an account.

        Raises:
            DuplicateAccountError: The user already has an account by that name.
            InvalidAmountError: Opening balance has the wrong sign for the type,
                or more decimal places than a balance holds.
        """
        name = _clean_name(name)
        if not initial_balance.is_finite():
            raise InvalidAmountError("initialBalance", "Initial balance must be a number")
        check_scale(initial_balance, field="initialBalance")
        if self._name_taken(acting_user_id, name):
            raise DuplicateAccountError(name)
        if account_type == AccountType.CREDIT and initial_balance > ZERO:
            raise InvalidAmountError(
                "initialBalance",
                "Credit card balance must be zero or negative",
                title="Invalid balance for credit account",
            )
        if account_type != AccountType.CREDIT and initial_balance < ZERO:
            raise InvalidAmountError(
                "initialBalance", "Initial balance must be zero or positive"
            )

        account = Account(
            user_id=acting_user_id,
            name=name,
            account_type=account_type,
            currency=currency,
            opening_balance=initial_balance,
            current_balance=initial_balance,
        )
        self.session.add(account)
        self.session.flush()

        logger.info(
            "account_created",
            extra={
                "account_id": str(account.id),
                "account_type": account_type.value,
                "currency": currency.value,
                "opening_balance": initial_balance,
            },
        )
        return account

    def list_accounts(
        self, acting_user_id: UUID, account_type: AccountType | None = None
    ) -> list[Account]:
        stmt = select(Account).where(Account.user_id == acting_user_id)
        if account_type is not None:
            stmt = stmt.where(Account.account_type == account_type)
        return list(self.session.scalars(stmt.order_by(Account.created_at, Account.name)))

    def get_account(self, account_id: UUID, acting_user_id: UUID) -> Account:
        return self._guard.require_account(account_id, acting_user_id)

    def update_account(
        self,
        account_id: UUID,
        acting_user_id: UUID,
        *,
        name: str,
        currency: CurrencyCode,
    ) -> Account:
        """Rename an account and/or change its currency label."""
        account = self._guard.require_account(account_id, acting_user_id)
        name = _clean_name(name)
        if name != account.name and self._name_taken(acting_user_id, name):
            raise DuplicateAccountError(name)

        account.name = name
        account.currency = currency
        self.session.flush()

        logger.info(
            "account_updated",
            extra={"account_id": str(account.id), "currency": currency.value},
        )
        return account

    def delete_account(self, account_id: UUID, acting_user_id: UUID) -> None:
        """
        Close an account that has no history.

        Raises:
            AccountInUseError: The account has transactions.
        """
        account = self._guard.require_account(account_id, acting_user_id)
        if TransactionSelector(self.session).account_has_transactions(account.id):
            raise AccountInUseError(account.id)

        self.session.delete(account)
        self.session.flush()
        logger.info("account_deleted", extra={"account_id": str(account_id)})
