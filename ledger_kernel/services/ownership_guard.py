"""
OwnershipGuard -- who may touch which resource.

Responsibility:
    Decides whether an acting user may access an account or category
    fetched by id, and turns a denial into the right typed error.  The
    decision itself (``authorize``) is a pure function over a Scope.

Architecture position:
    Kernel > Services.  Called by every service/orchestrator operation
    before it reads or mutates a resource fetched by id whose lookup is
    not already filtered by user.

Invariants enforced:
    - OWNERSHIP: an OwnedScope resource is visible only to its owner.
    - Global categories are visible to everyone and mutable by no one.

Failure modes:
    - AccountNotFoundError / CategoryNotFoundError: id unknown.
    - AuthorizationError: resource exists but belongs to someone else.
    - GlobalCategoryImmutableError: mutation of a global category.

Audit relevance:
    Every denial is logged as ``authorization_denied`` with the resource
    type and id, never with the owner's id.
"""

from enum import Enum
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.domain.scope import GlobalScope, OwnedScope, Scope
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    AuthorizationError,
    CategoryNotFoundError,
    GlobalCategoryImmutableError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.models.category import Category

logger = get_logger("services.ownership")


class Decision(str, Enum):
    ALLOWED = "allowed"
    DENIED = "denied"


def authorize(resource_scope: Scope, acting_user_id: UUID) -> Decision:
    """Pure access decision for a resource's scope."""
    match resource_scope:
        case GlobalScope():
            return Decision.ALLOWED
        case OwnedScope(owner_id=owner_id):
            if owner_id == acting_user_id:
                return Decision.ALLOWED
            return Decision.DENIED
    raise TypeError(f"Unknown scope: {resource_scope!r}")


class OwnershipGuard:
    """
    Fetch-and-check for resources addressed by id.

    Contract:
        ``require_*`` returns the loaded row or raises.  Accounts are never
        global, so only an OwnedScope can pass for them.
    """

    def __init__(self, session: Session):
        self.session = session

    def require_account(self, account_id: UUID, acting_user_id: UUID) -> Account:
        """Load an account the acting user owns."""
        account = self.session.get(Account, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        self._check(OwnedScope(account.user_id), acting_user_id, "account", account_id)
        return account

    def require_category(self, category_id: UUID, acting_user_id: UUID) -> Category:
        """Load a category the acting user may read (global or own)."""
        category = self.session.get(Category, category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        self._check(category.scope, acting_user_id, "category", category_id)
        return category

    def require_owned_category(
        self, category_id: UUID, acting_user_id: UUID, action: str = "modified"
    ) -> Category:
        """Load a category the acting user may mutate (own only).

        Raises:
            GlobalCategoryImmutableError: If the category is global.
        """
        category = self.session.get(Category, category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        if category.is_global:
            logger.info(
                "global_category_mutation_rejected",
                extra={"category_id": str(category_id), "action": action},
            )
            raise GlobalCategoryImmutableError(category_id, action)
        self._check(category.scope, acting_user_id, "category", category_id)
        return category

    def _check(
        self,
        scope: Scope,
        acting_user_id: UUID,
        resource_type: str,
        resource_id: UUID,
    ) -> None:
        if authorize(scope, acting_user_id) is Decision.DENIED:
            logger.warning(
                "authorization_denied",
                extra={
                    "resource_type": resource_type,
                    "resource_id": str(resource_id),
                    "acting_user_id": str(acting_user_id),
                },
            )
            raise AuthorizationError(resource_type, resource_id)
