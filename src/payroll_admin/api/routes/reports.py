"""Report endpoints."""

from uuid import UUID

from fastapi import APIRouter

from payroll_admin.api.dependencies import DbSession, PayrollStaff
from payroll_admin.api.routes.payroll import Month, Year
from payroll_admin.api.schemas import (
    AttendanceReportResponse,
    AttendanceReportRowResponse,
    DirectoryRowResponse,
    IncentiveReportResponse,
    IncentiveReportRowResponse,
    SalaryReportResponse,
)
from payroll_admin.services.reporting_service import ReportingService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/attendance/{year}/{month}", response_model=AttendanceReportResponse)
async def attendance_report(
    db: DbSession,
    _: PayrollStaff,
    year: Year,
    month: Month,
    department_id: UUID | None = None,
) -> AttendanceReportResponse:
    rows = await ReportingService(db).attendance_report(year, month, department_id)
    return AttendanceReportResponse(
        year=year,
        month=month,
        rows=[AttendanceReportRowResponse.model_validate(r) for r in rows],
    )


@router.get("/incentives/{year}/{month}", response_model=IncentiveReportResponse)
async def incentive_report(
    db: DbSession,
    _: PayrollStaff,
    year: Year,
    month: Month,
    department_id: UUID | None = None,
) -> IncentiveReportResponse:
    rows = await ReportingService(db).incentive_report(year, month, department_id)
    return IncentiveReportResponse(
        year=year,
        month=month,
        rows=[IncentiveReportRowResponse.model_validate(r) for r in rows],
    )


@router.get("/salary/{year}/{month}", response_model=SalaryReportResponse)
async def salary_report(
    db: DbSession,
    _: PayrollStaff,
    year: Year,
    month: Month,
    department_id: UUID | None = None,
) -> SalaryReportResponse:
    report = await ReportingService(db).salary_report(year, month, department_id)
    return SalaryReportResponse.model_validate(report)


@router.get("/employee-directory", response_model=list[DirectoryRowResponse])
async def employee_directory(
    db: DbSession,
    _: PayrollStaff,
    department_id: UUID | None = None,
) -> list[DirectoryRowResponse]:
    rows = await ReportingService(db).employee_directory(department_id)
    return [DirectoryRowResponse.model_validate(r) for r in rows]
