"""
Module: ledger_kernel.db.engine
Responsibility: SQLAlchemy engine initialization, session factory management,
    and transactional scope utilities.  This is the single point of database
    connection configuration for the whole system.
Architecture position: Kernel > DB.  May import from db/base.py and
    exceptions.py.  MUST NOT import from services/, selectors/, domain/, or
    outer layers (create_tables imports models lazily).

Invariants enforced:
    - Every unit of work runs inside session_scope(): commit on success,
      rollback on any exception.  Partial postings are never observable.
    - PostgreSQL runs at READ COMMITTED with explicit row-level locks
      (SELECT ... FOR UPDATE) on account rows before balance mutation.
    - SQLite opens every transaction with BEGIN IMMEDIATE so writers are
      serialized at the database level (SQLite ignores FOR UPDATE).
    - A StaleDataError raised at commit (version column mismatch) surfaces
      as OptimisticLockError; run_in_transaction() retries it.

Failure modes:
    - RuntimeError if get_engine/get_session/get_session_factory is called
      before init_engine_from_url().
    - OptimisticLockError if run_in_transaction() exhausts its attempts.
"""

import atexit
from contextlib import contextmanager
from typing import Callable, Generator, TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from ledger_kernel.exceptions import OptimisticLockError
from ledger_kernel.logging_config import get_logger

logger = get_logger("db.engine")

T = TypeVar("T")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _install_sqlite_transaction_hooks(engine: Engine) -> None:
    """Take transaction control away from pysqlite and emit BEGIN IMMEDIATE.

    pysqlite defers BEGIN until the first DML statement, which breaks
    SAVEPOINT handling and lets two writers read the same balance.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 5,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Initialize the SQLAlchemy engine from a database URL.

    Postconditions: Module-level _engine and _SessionFactory are initialized.
        A second call replaces the first.

    Args:
        database_url: postgresql://... for production, sqlite:// for tests
            and local runs (``sqlite://`` alone is a shared in-memory DB).
        echo: If True, log all SQL statements.
        pool_size: Connections kept in the pool (PostgreSQL only).
        max_overflow: Max connections beyond pool_size (PostgreSQL only).
        pool_pre_ping: Test connections before use.
        pool_timeout: Seconds to wait for a pooled connection.
        pool_recycle: Seconds after which a connection is recycled.

    Returns:
        SQLAlchemy Engine instance.
    """
    global _engine, _SessionFactory

    if database_url.startswith("sqlite"):
        in_memory = database_url in ("sqlite://", "sqlite:///:memory:")
        kwargs: dict = {
            "echo": echo,
            "connect_args": {"check_same_thread": False, "timeout": 30},
        }
        if in_memory:
            kwargs["poolclass"] = StaticPool
        _engine = create_engine(database_url, **kwargs)
        _install_sqlite_transaction_hooks(_engine)
    else:
        _engine = create_engine(
            database_url,
            echo=echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=pool_pre_ping,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            isolation_level="READ COMMITTED",
        )

    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info(
        "engine_initialized",
        extra={"dialect": _engine.dialect.name, "echo": echo},
    )
    return _engine


def _require_initialized() -> None:
    if _engine is None or _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")


def get_engine() -> Engine:
    _require_initialized()
    return _engine


def get_session() -> Session:
    """A fresh session from the bound factory."""
    _require_initialized()
    return _SessionFactory()


def get_session_factory() -> sessionmaker[Session]:
    """The bound factory; each thread opens its own sessions from it."""
    _require_initialized()
    return _SessionFactory


@contextmanager
def session_scope(
    factory: Callable[[], Session] | None = None,
) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Postconditions: On normal exit, session is committed and closed.
        On exception, session is rolled back and closed and the exception
        re-raised.  A StaleDataError at commit is re-raised as
        OptimisticLockError.

    Usage:
        with session_scope() as session:
            orchestrator = TransactionOrchestrator(session)
            orchestrator.create_transaction(request, acting_user_id=user_id)
    """
    session = factory() if factory is not None else get_session()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except StaleDataError as exc:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise OptimisticLockError("account", None) from exc
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def run_in_transaction(
    work: Callable[[Session], T],
    attempts: int = 3,
    factory: Callable[[], Session] | None = None,
) -> T:
    """
    Run ``work(session)`` in its own unit of work, retrying optimistic
    lock conflicts.

    Each attempt gets a fresh session, so the retried work re-reads the
    account rows it is about to mutate.

    Raises:
        OptimisticLockError: If every attempt conflicted.
    """
    for attempt in range(1, attempts + 1):
        try:
            with session_scope(factory) as session:
                return work(session)
        except OptimisticLockError:
            if attempt == attempts:
                raise
            logger.warning(
                "optimistic_lock_retry",
                extra={"attempt": attempt, "max_attempts": attempts},
            )
    raise AssertionError("unreachable")


def create_tables() -> None:
    """Create the users, accounts, categories, transactions and investment tables."""
    from ledger_kernel.db.base import Base
    import ledger_kernel.models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(get_engine())


def reset_engine() -> None:
    """Dispose the bound engine and forget it (API shutdown, test teardown)."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


@atexit.register
def _dispose_at_exit() -> None:
    if _engine is not None:
        _engine.dispose()
