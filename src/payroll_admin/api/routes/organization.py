"""Department and job grade endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from payroll_admin.api.dependencies import AdminOnly, AnyRole, DbSession
from payroll_admin.api.schemas import (
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
    ErrorResponse,
    IncentiveHistoryResponse,
    IncentiveUpdate,
    JobGradeCreate,
    JobGradeResponse,
)
from payroll_admin.services.department_service import DepartmentService, JobGradeService

departments_router = APIRouter(prefix="/departments", tags=["departments"])
job_grades_router = APIRouter(prefix="/job-grades", tags=["job-grades"])


# ============================================================================
# Departments
# ============================================================================


@departments_router.get("", response_model=list[DepartmentResponse])
async def list_departments(db: DbSession, _: AnyRole) -> list[DepartmentResponse]:
    departments = await DepartmentService(db).list_departments()
    return [DepartmentResponse.model_validate(d) for d in departments]


@departments_router.post(
    "",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_department(
    db: DbSession, _: AdminOnly, payload: DepartmentCreate
) -> DepartmentResponse:
    department = await DepartmentService(db).create_department(**payload.model_dump())
    await db.commit()
    return DepartmentResponse.model_validate(department)


@departments_router.get(
    "/{department_id}",
    response_model=DepartmentResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_department(
    db: DbSession, _: AnyRole, department_id: UUID
) -> DepartmentResponse:
    department = await DepartmentService(db).get_department(department_id)
    return DepartmentResponse.model_validate(department)


@departments_router.put(
    "/{department_id}",
    response_model=DepartmentResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def rename_department(
    db: DbSession, _: AdminOnly, department_id: UUID, payload: DepartmentUpdate
) -> DepartmentResponse:
    department = await DepartmentService(db).rename_department(
        department_id, payload.name, payload.description
    )
    await db.commit()
    return DepartmentResponse.model_validate(department)


@departments_router.delete(
    "/{department_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_department(db: DbSession, _: AdminOnly, department_id: UUID) -> None:
    await DepartmentService(db).delete_department(department_id)
    await db.commit()


@departments_router.put(
    "/{department_id}/incentive",
    response_model=DepartmentResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def update_department_incentive(
    db: DbSession, _: AdminOnly, department_id: UUID, payload: IncentiveUpdate
) -> DepartmentResponse:
    """Set the current incentive and append it to the department's history."""
    department = await DepartmentService(db).update_incentive(
        department_id, payload.incentive_percentage, payload.effective_date
    )
    await db.commit()
    return DepartmentResponse.model_validate(department)


@departments_router.get(
    "/{department_id}/incentive-history",
    response_model=list[IncentiveHistoryResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_incentive_history(
    db: DbSession, _: AnyRole, department_id: UUID
) -> list[IncentiveHistoryResponse]:
    history = await DepartmentService(db).get_incentive_history(department_id)
    return [IncentiveHistoryResponse.model_validate(h) for h in history]


# ============================================================================
# Job grades
# ============================================================================


@job_grades_router.get("", response_model=list[JobGradeResponse])
async def list_job_grades(db: DbSession, _: AnyRole) -> list[JobGradeResponse]:
    grades = await JobGradeService(db).list_job_grades()
    return [JobGradeResponse.model_validate(g) for g in grades]


@job_grades_router.post(
    "",
    response_model=JobGradeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_job_grade(
    db: DbSession, _: AdminOnly, payload: JobGradeCreate
) -> JobGradeResponse:
    grade = await JobGradeService(db).create_job_grade(**payload.model_dump())
    await db.commit()
    return JobGradeResponse.model_validate(grade)


@job_grades_router.put(
    "/{job_grade_id}",
    response_model=JobGradeResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def update_job_grade(
    db: DbSession, _: AdminOnly, job_grade_id: UUID, payload: JobGradeCreate
) -> JobGradeResponse:
    grade = await JobGradeService(db).update_job_grade(job_grade_id, **payload.model_dump())
    await db.commit()
    return JobGradeResponse.model_validate(grade)


@job_grades_router.delete(
    "/{job_grade_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_job_grade(db: DbSession, _: AdminOnly, job_grade_id: UUID) -> None:
    await JobGradeService(db).delete_job_grade(job_grade_id)
    await db.commit()
