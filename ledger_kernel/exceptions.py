"""
Typed exception hierarchy for the ledger kernel.

Every error the kernel raises is a subclass of ``LedgerKernelError`` and
carries:
  1. a ``code`` class attribute (machine-readable, API-safe),
  2. a ``status`` class attribute (the HTTP status the API layer maps it to),
  3. structured attributes describing the failure (never parse messages).

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- ValidationError                  400
    |   +-- InvalidAmountError
    |   +-- TransferTypeNotAllowedError
    |   +-- SameAccountTransferError
    |
    +-- NotFoundError                    404
    |   +-- UserNotFoundError
    |   +-- AccountNotFoundError
    |   +-- CategoryNotFoundError
    |   +-- TransactionNotFoundError
    |
    +-- AuthorizationError               403
    |   +-- InvalidCredentialsError      401
    |
    +-- ConflictError                    409
    |   +-- DuplicateAccountError
    |   +-- DuplicateCategoryError
    |   +-- EmailAlreadyExistsError
    |   +-- AccountInUseError
    |   +-- CategoryInUseError
    |
    +-- InvalidOperationError            400
    |   +-- TransferLegDeletionError
    |   +-- InvalidAccountTypeError
    |   +-- GlobalCategoryImmutableError 403
    |
    +-- ConcurrencyError                 409
        +-- OptimisticLockError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|---------------------------------------
Validation      | VALIDATION_FAILED             | Malformed / out-of-range input
                | INVALID_AMOUNT                | Sign does not match type, bad balance
                | TRANSFER_TYPE_NOT_ALLOWED     | TRANSFER via single-transaction path
                | SAME_ACCOUNT_TRANSFER         | from_account == to_account
----------------|-------------------------------|---------------------------------------
Not found       | USER_NOT_FOUND                | User id unknown
                | ACCOUNT_NOT_FOUND             | Account id unknown
                | CATEGORY_NOT_FOUND            | Category id unknown
                | TRANSACTION_NOT_FOUND         | Transaction id unknown for this user
----------------|-------------------------------|---------------------------------------
Authorization   | ACCESS_DENIED                 | Resource exists, not owned by actor
                | INVALID_CREDENTIALS           | Email/password pair rejected
----------------|-------------------------------|---------------------------------------
Conflict        | DUPLICATE_ACCOUNT             | Account name already used by user
                | DUPLICATE_CATEGORY            | (name, type) already used by user
                | EMAIL_ALREADY_EXISTS          | Signup with a registered email
                | ACCOUNT_IN_USE                | Delete account with transactions
                | CATEGORY_IN_USE               | Delete category with transactions
----------------|-------------------------------|---------------------------------------
Operation       | TRANSFER_LEG_DELETION         | Delete one leg of a transfer
                | INVALID_ACCOUNT_TYPE          | Trade on a non-INVESTMENT account
                | GLOBAL_CATEGORY_IMMUTABLE     | Modify/delete a global category
----------------|-------------------------------|---------------------------------------
Concurrency     | OPTIMISTIC_LOCK_CONFLICT      | Account row changed underneath us

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        orchestrator.create_transfer(request, acting_user_id=user_id)
    except SameAccountTransferError as e:
        return envelope(400, e.code, e.errors)
    except LedgerKernelError as e:
        return envelope(e.status, str(e), e.errors)

``errors`` is always a ``dict[str, str]`` of field -> message suitable
for the response envelope.
"""

from uuid import UUID


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses have a ``code`` and a ``status`` class attribute.
    """

    code: str = "LEDGER_KERNEL_ERROR"
    status: int = 500
    title: str = "Ledger error"
    field: str = "error"

    @property
    def errors(self) -> dict[str, str]:
        """Field -> message map for the response envelope."""
        return {self.field: str(self)}


# Validation


class ValidationError(LedgerKernelError):
    """Malformed or out-of-range input.

    May carry several field-level messages at once.
    """

    code: str = "VALIDATION_FAILED"
    status: int = 400
    title: str = "Validation failed"

    def __init__(self, field_errors: dict[str, str]):
        self.field_errors = dict(field_errors)
        super().__init__(
            "; ".join(f"{k}: {v}" for k, v in self.field_errors.items())
        )

    @property
    def errors(self) -> dict[str, str]:
        return dict(self.field_errors)


class InvalidAmountError(ValidationError):
    """Amount sign or magnitude does not match the operation."""

    code: str = "INVALID_AMOUNT"
    title: str = "Invalid amount"

    def __init__(self, field: str, message: str, title: str | None = None):
        self.field = field
        if title is not None:
            self.title = title
        super().__init__({field: message})


class TransferTypeNotAllowedError(ValidationError):
    """A TRANSFER was submitted through the single-transaction path."""

    code: str = "TRANSFER_TYPE_NOT_ALLOWED"
    title: str = "Invalid transaction type"

    def __init__(self):
        super().__init__(
            {"type": "Use the transfer endpoint for transfer transactions"}
        )


class SameAccountTransferError(ValidationError):
    """Transfer source and destination are the same account."""

    code: str = "SAME_ACCOUNT_TRANSFER"
    title: str = "Invalid transfer"

    def __init__(self, account_id: UUID):
        self.account_id = account_id
        super().__init__({"accounts": "Cannot transfer to the same account"})


# Not found


class NotFoundError(LedgerKernelError):
    """Base exception for unknown resource ids."""

    code: str = "NOT_FOUND"
    status: int = 404
    resource_type: str = "resource"

    def __init__(self, resource_id: UUID | str):
        self.resource_id = resource_id
        super().__init__(f"{self.resource_type.capitalize()} not found: {resource_id}")

    @property
    def title(self) -> str:
        return f"{self.resource_type.capitalize()} not found"

    @property
    def field(self) -> str:
        return self.resource_type


class UserNotFoundError(NotFoundError):
    code: str = "USER_NOT_FOUND"
    resource_type: str = "user"


class AccountNotFoundError(NotFoundError):
    code: str = "ACCOUNT_NOT_FOUND"
    resource_type: str = "account"


class CategoryNotFoundError(NotFoundError):
    code: str = "CATEGORY_NOT_FOUND"
    resource_type: str = "category"


class TransactionNotFoundError(NotFoundError):
    code: str = "TRANSACTION_NOT_FOUND"
    resource_type: str = "transaction"


# Authorization


class AuthorizationError(LedgerKernelError):
    """Resource exists but is not owned by the acting user."""

    code: str = "ACCESS_DENIED"
    status: int = 403
    title: str = "Access denied"
    field: str = "authorization"

    def __init__(self, resource_type: str, resource_id: UUID | str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"You don't have access to this {resource_type}")


class InvalidCredentialsError(AuthorizationError):
    """Email/password pair did not match a registered user."""

    code: str = "INVALID_CREDENTIALS"
    status: int = 401
    title: str = "Invalid credentials"

    def __init__(self, email: str):
        self.email = email
        LedgerKernelError.__init__(self, "Invalid email or password")
        self.resource_type = "user"
        self.resource_id = email


# Conflict


class ConflictError(LedgerKernelError):
    """Base exception for duplicates and resources with dependents."""

    code: str = "CONFLICT"
    status: int = 409
    title: str = "Conflict"


class DuplicateAccountError(ConflictError):
    code: str = "DUPLICATE_ACCOUNT"
    title: str = "Account already exists"
    field: str = "name"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"You already have an account named '{name}'")


class DuplicateCategoryError(ConflictError):
    code: str = "DUPLICATE_CATEGORY"
    title: str = "Category already exists"
    field: str = "name"

    def __init__(self, name: str, category_type: str):
        self.name = name
        self.category_type = category_type
        super().__init__(
            f"You already have a {category_type} category named '{name}'"
        )


class EmailAlreadyExistsError(ConflictError):
    code: str = "EMAIL_ALREADY_EXISTS"
    title: str = "Email already exists"
    field: str = "email"

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email is already in use")


class AccountInUseError(ConflictError):
    code: str = "ACCOUNT_IN_USE"
    title: str = "Account in use"
    field: str = "account"

    def __init__(self, account_id: UUID):
        self.account_id = account_id
        super().__init__("Cannot delete account with existing transactions")


class CategoryInUseError(ConflictError):
    code: str = "CATEGORY_IN_USE"
    title: str = "Category in use"
    field: str = "category"

    def __init__(self, category_id: UUID):
        self.category_id = category_id
        super().__init__("Cannot delete category with existing transactions")


# Invalid operation


class InvalidOperationError(LedgerKernelError):
    """The request is well-formed but the operation is not permitted."""

    code: str = "INVALID_OPERATION"
    status: int = 400
    title: str = "Invalid operation"


class TransferLegDeletionError(InvalidOperationError):
    code: str = "TRANSFER_LEG_DELETION"
    field: str = "transaction"

    def __init__(self, transaction_id: UUID):
        self.transaction_id = transaction_id
        super().__init__("Cannot delete transfer transactions individually")


class InvalidAccountTypeError(InvalidOperationError):
    code: str = "INVALID_ACCOUNT_TYPE"
    title: str = "Invalid account type"
    field: str = "account"

    def __init__(self, account_id: UUID, account_type: str, required_type: str):
        self.account_id = account_id
        self.account_type = account_type
        self.required_type = required_type
        super().__init__(
            f"Investment transactions can only be created in {required_type} accounts"
        )


class GlobalCategoryImmutableError(InvalidOperationError):
    code: str = "GLOBAL_CATEGORY_IMMUTABLE"
    status: int = 403
    field: str = "category"

    def __init__(self, category_id: UUID, action: str = "modified"):
        self.category_id = category_id
        self.action = action
        super().__init__(f"Global categories cannot be {action}")

    @property
    def title(self) -> str:
        verb = "delete" if self.action == "deleted" else "modify"
        return f"Cannot {verb} global category"


# Concurrency


class ConcurrencyError(LedgerKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"
    status: int = 409
    title: str = "Concurrent modification"


class OptimisticLockError(ConcurrencyError):
    """Optimistic locking conflict detected."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"
    field: str = "concurrency"

    def __init__(self, entity_type: str, entity_id: UUID | str | None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id}: "
            "entity was modified by another transaction"
        )
