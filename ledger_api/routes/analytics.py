"""
Analytics routes: net worth, monthly summary, category spending.
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, sessionmaker

from ledger_api.dependencies import (
    get_acting_user_id,
    get_app_settings,
    get_session_factory,
)
from ledger_api.responses import envelope
from ledger_api.schemas import (
    CategorySpendingResponse,
    MonthlySummaryResponse,
    NetWorthResponse,
)
from ledger_config.schema import LedgerSettings
from ledger_kernel.db.engine import session_scope
from ledger_kernel.selectors.analytics_selector import AnalyticsSelector

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


@router.get("/networth")
def net_worth(
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
    settings: LedgerSettings = Depends(get_app_settings),
):
    with session_scope(factory) as session:
        result = AnalyticsSelector(session, settings.reporting_timezone).net_worth(user_id)
    return envelope(200, "Net worth calculated successfully", NetWorthResponse.of(result))


@router.get("/monthly-summary")
def monthly_summary(
    year: int = Query(...),
    month: int = Query(...),
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
    settings: LedgerSettings = Depends(get_app_settings),
):
    with session_scope(factory) as session:
        result = AnalyticsSelector(
            session, settings.reporting_timezone
        ).monthly_summary(user_id, year, month)
    return envelope(
        200, "Monthly summary retrieved successfully", MonthlySummaryResponse.of(result)
    )


@router.get("/category-spending")
def category_spending(
    start_date: datetime = Query(..., alias="startDate"),
    end_date: datetime = Query(..., alias="endDate"),
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
    settings: LedgerSettings = Depends(get_app_settings),
):
    with session_scope(factory) as session:
        result = AnalyticsSelector(
            session, settings.reporting_timezone
        ).category_spending(user_id, start_date, end_date)
    return envelope(
        200,
        "Category spending retrieved successfully",
        CategorySpendingResponse.of(result),
    )
