"""Payroll calculation and snapshot endpoints."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from payroll_admin.api.dependencies import AdminOnly, AnyRole, DbSession, PayrollStaff
from payroll_admin.api.schemas import (
    BatchCalculationResponse,
    CalculateRequest,
    CalculationPreviewResponse,
    EmployeeFailureResponse,
    ErrorResponse,
    GenerationResponse,
    SnapshotListResponse,
    SnapshotResponse,
)
from payroll_admin.calculators.types import BatchCalculationResult
from payroll_admin.services.payroll_service import PayrollService

router = APIRouter(prefix="/payroll", tags=["payroll"])

Year = Annotated[int, Path(ge=1, le=9999)]
Month = Annotated[int, Path(ge=1, le=12)]


def _batch_fields(result: BatchCalculationResult) -> dict[str, Any]:
    return {
        "year": result.year,
        "month": result.month,
        "total_employees": result.total_employees,
        "success_count": result.success_count,
        "failure_count": result.failure_count,
        "cancelled": result.cancelled,
        "total_gross": result.total_gross,
        "snapshots": [SnapshotResponse.model_validate(s) for s in result.snapshots],
        "failures": [EmployeeFailureResponse.model_validate(f) for f in result.failures],
    }


# ============================================================================
# Calculation
# ============================================================================


@router.get(
    "/calculate",
    response_model=CalculationPreviewResponse,
    responses={404: {"model": ErrorResponse}},
)
async def preview_gross_pay(
    db: DbSession,
    _: PayrollStaff,
    employee_id: UUID,
    year: Annotated[int, Query(ge=1, le=9999)],
    month: Annotated[int, Query(ge=1, le=12)],
) -> CalculationPreviewResponse:
    """Calculate gross pay for one employee without storing it."""
    calculation = await PayrollService(db).preview_gross_pay(employee_id, year, month)
    return CalculationPreviewResponse.model_validate(calculation)


@router.post(
    "/calculate",
    response_model=SnapshotResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def calculate_gross_pay(
    db: DbSession,
    _: PayrollStaff,
    payload: CalculateRequest,
) -> SnapshotResponse:
    """Calculate and store one employee's snapshot.

    Returns 409 when the snapshot exists and ``regenerate`` is false.
    """
    snapshot = await PayrollService(db).calculate_gross_pay(
        payload.employee_id,
        payload.year,
        payload.month,
        regenerate=payload.regenerate,
    )
    await db.commit()
    return SnapshotResponse.model_validate(snapshot)


@router.post(
    "/calculate-all/{year}/{month}",
    response_model=BatchCalculationResponse,
)
async def calculate_gross_pay_for_all(
    db: DbSession,
    _: PayrollStaff,
    year: Year,
    month: Month,
) -> BatchCalculationResponse:
    """Calculate and store snapshots for every active employee."""
    result = await PayrollService(db).calculate_gross_pay_for_all(year, month)
    await db.commit()
    return BatchCalculationResponse(**_batch_fields(result))


@router.post(
    "/generate/{year}/{month}",
    response_model=GenerationResponse,
    responses={409: {"model": ErrorResponse}},
)
async def generate_monthly_snapshots(
    db: DbSession,
    _: AdminOnly,
    year: Year,
    month: Month,
) -> GenerationResponse:
    """Regenerate the full snapshot set of a period."""
    service = PayrollService(db)
    result = await service.generate_monthly_snapshot_set(year, month)
    return GenerationResponse(**_batch_fields(result), success=service.is_successful(result))


# ============================================================================
# Snapshot retrieval
# ============================================================================


@router.get("/snapshots", response_model=SnapshotListResponse)
async def list_snapshots(
    db: DbSession,
    _: AnyRole,
    year: Annotated[int | None, Query(ge=1, le=9999)] = None,
    month: Annotated[int | None, Query(ge=1, le=12)] = None,
    employee_id: UUID | None = None,
    department_id: UUID | None = None,
) -> SnapshotListResponse:
    """List stored snapshots matching the given filters."""
    snapshots = await PayrollService(db).query_snapshots(
        year=year,
        month=month,
        employee_id=employee_id,
        department_id=department_id,
    )
    return SnapshotListResponse(
        items=[SnapshotResponse.model_validate(s) for s in snapshots],
        total=len(snapshots),
    )


@router.get(
    "/snapshots/employee/{employee_id}",
    response_model=SnapshotListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_employee_snapshots(
    db: DbSession,
    _: AnyRole,
    employee_id: UUID,
) -> SnapshotListResponse:
    snapshots = await PayrollService(db).get_snapshots_for_employee(employee_id)
    return SnapshotListResponse(
        items=[SnapshotResponse.model_validate(s) for s in snapshots],
        total=len(snapshots),
    )


@router.get(
    "/snapshots/department/{department_id}/{year}/{month}",
    response_model=SnapshotListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_department_snapshots(
    db: DbSession,
    _: AnyRole,
    department_id: UUID,
    year: Year,
    month: Month,
) -> SnapshotListResponse:
    snapshots = await PayrollService(db).get_snapshots_by_department(
        department_id, year, month
    )
    return SnapshotListResponse(
        items=[SnapshotResponse.model_validate(s) for s in snapshots],
        total=len(snapshots),
    )


@router.get(
    "/snapshots/{employee_id}/{year}/{month}",
    response_model=SnapshotResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_snapshot(
    db: DbSession,
    _: AnyRole,
    employee_id: UUID,
    year: Year,
    month: Month,
) -> SnapshotResponse:
    snapshot = await PayrollService(db).get_snapshot(employee_id, year, month)
    return SnapshotResponse.model_validate(snapshot)
