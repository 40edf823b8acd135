"""
FastAPI dependencies.

The acting user comes from the ``X-User-Id`` header and must name a
registered user; token issuance and verification sit in front of this
service.
"""

from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session, sessionmaker

from ledger_config.schema import LedgerSettings
from ledger_kernel.db.engine import session_scope
from ledger_kernel.models.user import User
from ledger_services.reports.store import LocalReportStore, ReportStore


def get_app_settings(request: Request) -> LedgerSettings:
    return request.app.state.settings


def get_session_factory(request: Request) -> sessionmaker[Session]:
    """Session factory bound at startup; each request opens its own unit of work."""
    return request.app.state.session_factory


def get_report_store(
    settings: LedgerSettings = Depends(get_app_settings),
) -> ReportStore:
    return LocalReportStore(settings.report_dir, settings.report_base_url)


def get_acting_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    factory: sessionmaker[Session] = Depends(get_session_factory),
) -> UUID:
    """
    Resolve the acting user.

    Raises 401 when the header is missing, malformed, or names no user.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid user identity") from None

    with session_scope(factory) as session:
        if session.get(User, user_id) is None:
            raise HTTPException(status_code=401, detail="Invalid user identity")
    return user_id
