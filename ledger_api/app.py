"""
FastAPI application factory.

Startup configures logging, binds the engine from settings, creates the
schema and seeds the global categories.  Every error leaves the process
as the standard response envelope.
"""

from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ledger_api.responses import envelope
from ledger_api.routes import (
    accounts,
    analytics,
    auth,
    categories,
    health,
    reports,
    transactions,
)
from ledger_config import get_settings
from ledger_config.schema import LedgerSettings
from ledger_kernel import __version__
from ledger_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from ledger_kernel.exceptions import LedgerKernelError
from ledger_kernel.logging_config import LogContext, configure_logging, get_logger
from ledger_kernel.services.category_service import CategoryService

logger = get_logger("api")


def _field_name(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return parts[-1] if parts else "request"


def _validation_errors(exc: RequestValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for error in exc.errors():
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(_field_name(tuple(error.get("loc", ()))), message)
    return errors


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: LedgerSettings = app.state.settings
    configure_logging(level=settings.log_level)
    init_engine_from_url(
        settings.database_url, echo=settings.echo_sql, pool_size=settings.pool_size
    )
    create_tables()
    app.state.session_factory = get_session_factory()

    with session_scope(app.state.session_factory) as session:
        CategoryService(session).seed_global_categories(settings.global_categories)

    logger.info("api_started", extra={"version": __version__})
    yield
    reset_engine()
    logger.info("api_stopped")


def create_app(settings: LedgerSettings | None = None) -> FastAPI:
    """Build the application; ``settings`` defaults to ``get_settings()``."""
    app = FastAPI(
        title="Ledger API",
        description="Personal finance ledger: accounts, transactions, analytics, reports",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings or get_settings()

    @app.middleware("http")
    async def bind_log_context(request: Request, call_next):
        request_id = request.headers.get("X-Request-Id") or str(uuid4())
        with LogContext.bind(
            request_id=request_id, actor_id=request.headers.get("X-User-Id")
        ):
            response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response

    @app.exception_handler(LedgerKernelError)
    async def ledger_error(request: Request, exc: LedgerKernelError):
        logger.info(
            "request_rejected",
            extra={"error_code": exc.code, "status": exc.status, "path": request.url.path},
        )
        return envelope(exc.status, exc.title, errors=exc.errors)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return envelope(400, "Validation failed", errors=_validation_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return envelope(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("unhandled_error", extra={"path": request.url.path})
        return envelope(
            500, "An unexpected error occurred", errors={"error": "Internal server error"}
        )

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(accounts.router)
    app.include_router(categories.router)
    app.include_router(transactions.router)
    app.include_router(analytics.router)
    app.include_router(reports.router)
    return app
