"""
Pytest fixtures for the ledger test suite.

Provides:
- An in-memory SQLite database shared by the whole session
- Per-test sessions isolated by an outer transaction that is rolled back
- Users, accounts and categories to post against
- Log capture as parsed JSON records

Environment Variables:
- DATABASE_URL: run the suite against another database (e.g. PostgreSQL).
  Defaults to in-memory SQLite.
"""

import json
import logging
import os
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base
from ledger_kernel.db.engine import init_engine_from_url
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.models import (
    Account,
    AccountType,
    Category,
    CategoryType,
    CurrencyCode,
    User,
)
from ledger_kernel.services.user_service import hash_password

DEFAULT_DATABASE_URL = "sqlite://"

TEST_PASSWORD = "Secret#123"

# bcrypt is slow on purpose; hash once for every fixture user
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


# --- logging ---


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, orchestrator):
            orchestrator.create_transaction(...)
            logs = captured_logs()
            assert any(r["message"] == "transaction_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    yield lambda: [json.loads(line) for line in stream.getvalue().splitlines()]

    root.removeHandler(handler)
    root.setLevel(previous_level)


# --- database ---


@pytest.fixture(scope="session")
def db_engine():
    """Single engine for the entire test session.

    The fixture keeps its own reference, so tests that rebind the module
    level engine (API and concurrency tests) do not disturb it.
    """
    eng = init_engine_from_url(os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL))
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture(scope="function")
def session(db_engine) -> Generator[Session, None, None]:
    """Session on its own connection; everything it writes is rolled back.

    ``session.commit()`` inside a test only releases a savepoint.
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


# --- time ---


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(datetime(2024, 3, 31, 18, 30, tzinfo=timezone.utc))


# --- users, accounts, categories ---


@pytest.fixture
def make_user(session):
    """Factory for persisted users."""
    counter = {"n": 0}

    def _make(first_name: str = "Asha", last_name: str = "Rao", email: str | None = None):
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            password_hash=TEST_PASSWORD_HASH,
            first_name=first_name,
            last_name=last_name,
        )
        session.add(user)
        session.flush()
        return user

    return _make


@pytest.fixture
def make_account(session):
    """Factory for persisted accounts with a given opening balance."""

    def _make(
        user: User,
        name: str = "Checking",
        account_type: AccountType = AccountType.CHECKING,
        balance: Decimal | str = "0",
        currency: CurrencyCode = CurrencyCode.USD,
    ):
        amount = Decimal(balance)
        account = Account(
            user_id=user.id,
            name=name,
            account_type=account_type,
            currency=currency,
            opening_balance=amount,
            current_balance=amount,
        )
        session.add(account)
        session.flush()
        return account

    return _make


@pytest.fixture
def make_category(session):
    def _make(name: str, category_type: CategoryType, user: User | None = None):
        category = Category(
            name=name,
            category_type=category_type,
            user_id=user.id if user is not None else None,
        )
        session.add(category)
        session.flush()
        return category

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def other_user(make_user):
    return make_user(first_name="Ben", last_name="Okafor")


@pytest.fixture
def checking(make_account, user):
    return make_account(user, "Checking", AccountType.CHECKING, "1000")


@pytest.fixture
def savings(make_account, user):
    return make_account(user, "Savings", AccountType.SAVINGS, "500")


@pytest.fixture
def credit_card(make_account, user):
    return make_account(user, "Visa", AccountType.CREDIT, "-200")


@pytest.fixture
def brokerage(make_account, user):
    return make_account(user, "Brokerage", AccountType.INVESTMENT, "5000")


@pytest.fixture
def salary(make_category):
    return make_category("Salary", CategoryType.INCOME)


@pytest.fixture
def groceries(make_category):
    return make_category("Groceries", CategoryType.EXPENSE)


@pytest.fixture
def other_account(make_account, other_user):
    return make_account(other_user, "Their Checking", AccountType.CHECKING, "300")
