"""
Report routes.

GET /api/reports/monthly?year=&month=
GET /api/reports/custom?startDate=&endDate=

Both answer with ``{"downloadUrl": ...}``.
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, sessionmaker

from ledger_api.dependencies import (
    get_acting_user_id,
    get_app_settings,
    get_report_store,
    get_session_factory,
)
from ledger_api.responses import envelope
from ledger_api.schemas import ReportResponse
from ledger_config.schema import LedgerSettings
from ledger_kernel.db.engine import session_scope
from ledger_services.reports.service import ReportService
from ledger_services.reports.store import ReportStore

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("/monthly")
def monthly_report(
    year: int = Query(...),
    month: int = Query(...),
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
    store: ReportStore = Depends(get_report_store),
    settings: LedgerSettings = Depends(get_app_settings),
):
    with session_scope(factory) as session:
        report = ReportService(
            session, store, reporting_timezone=settings.reporting_timezone
        ).monthly_report(user_id, year, month)
    return envelope(
        200,
        "Monthly report generated successfully",
        ReportResponse(download_url=report.download_url),
    )


@router.get("/custom")
def custom_report(
    start_date: datetime = Query(..., alias="startDate"),
    end_date: datetime = Query(..., alias="endDate"),
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
    store: ReportStore = Depends(get_report_store),
    settings: LedgerSettings = Depends(get_app_settings),
):
    with session_scope(factory) as session:
        report = ReportService(
            session, store, reporting_timezone=settings.reporting_timezone
        ).custom_report(user_id, start_date, end_date)
    return envelope(
        200,
        "Custom report generated successfully",
        ReportResponse(download_url=report.download_url),
    )
