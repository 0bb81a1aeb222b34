"""Dashboard endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query

from payroll_admin.api.dependencies import AnyRole, DbSession
from payroll_admin.api.schemas import (
    DashboardStatisticsResponse,
    ErrorResponse,
    PayrollSummaryResponse,
)
from payroll_admin.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/statistics", response_model=DashboardStatisticsResponse)
async def get_statistics(
    db: DbSession, _: AnyRole, as_of: date | None = None
) -> DashboardStatisticsResponse:
    statistics = await DashboardService(db).statistics(as_of)
    return DashboardStatisticsResponse.model_validate(statistics)


@router.get(
    "/payroll-summary",
    response_model=PayrollSummaryResponse,
    responses={422: {"model": ErrorResponse}},
)
async def get_payroll_summary(
    db: DbSession,
    _: AnyRole,
    year: Annotated[int | None, Query(ge=1, le=9999)] = None,
    month: Annotated[int | None, Query(ge=1, le=12)] = None,
) -> PayrollSummaryResponse:
    """Snapshot totals for a month; defaults to the current month."""
    today = date.today()
    summary = await DashboardService(db).payroll_summary(
        year or today.year, month or today.month
    )
    return PayrollSummaryResponse.model_validate(summary)
