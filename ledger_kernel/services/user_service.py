"""
UserService -- registration and credential checks.

Responsibility:
    Creates users with a bcrypt password hash and verifies email/password
    pairs.  Token issuance is the HTTP layer's concern.

Architecture position:
    Kernel > Services -- imperative shell, flush-only.

Invariants enforced:
    - Emails are stored stripped and lower-cased and are unique.
    - Plaintext passwords never leave this module and are never logged.

Failure modes:
    - EmailAlreadyExistsError on duplicate signup.
    - InvalidCredentialsError on an unknown email or wrong password (the
      two cases are indistinguishable to the caller).
    - UserNotFoundError from get_user.
"""

from uuid import UUID

import bcrypt
from sqlalchemy import select

from ledger_kernel.exceptions import (
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    UserNotFoundError,
    ValidationError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.user import User
from ledger_kernel.services.base import BaseService

logger = get_logger("services.user")

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(
        password.encode("utf-8")[:_BCRYPT_MAX_BYTES], bcrypt.gensalt()
    ).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(
        password.encode("utf-8")[:_BCRYPT_MAX_BYTES], password_hash.encode("utf-8")
    )


class UserService(BaseService):
    """User accounts (people, not ledger accounts)."""

    def _by_email(self, email: str) -> User | None:
        return self.session.scalar(select(User).where(User.email == email))

    def register(
        self, *, email: str, password: str, first_name: str, last_name: str
    ) -> User:
        """
        Register a new user.

        Raises:
            ValidationError: Blank email or password.
            EmailAlreadyExistsError: The email is taken.
        """
        email = normalize_email(email)
        errors: dict[str, str] = {}
        if not email:
            errors["email"] = "Email is required"
        if not password:
            errors["password"] = "Password is required"
        if errors:
            raise ValidationError(errors)
        if self._by_email(email) is not None:
            raise EmailAlreadyExistsError(email)

        user = User(
            email=email,
            password_hash=hash_password(password),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
        )
        self.session.add(user)
        self.session.flush()
        logger.info("user_registered", extra={"user_id": str(user.id)})
        return user

    def authenticate(self, email: str, password: str) -> User:
        """Return the user whose credentials match, else raise."""
        user = self._by_email(normalize_email(email))
        if user is None or not check_password(password or "", user.password_hash):
            logger.info("authentication_failed")
            raise InvalidCredentialsError(email)
        logger.info("user_authenticated", extra={"user_id": str(user.id)})
        return user

    def get_user(self, user_id: UUID) -> User:
        user = self.session.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user
