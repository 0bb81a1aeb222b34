"""Employee, salary, absence and incentive endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, status

from payroll_admin.api.dependencies import AnyRole, DbSession, PayrollStaff
from payroll_admin.api.schemas import (
    AbsenceRecordCreate,
    AbsenceRecordResponse,
    AbsenceRecordUpdate,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeStatusUpdate,
    EmployeeUpdate,
    ErrorResponse,
    IncentiveCreate,
    IncentiveResponse,
    SalaryRecordCreate,
    SalaryRecordResponse,
)
from payroll_admin.models import EmploymentStatus
from payroll_admin.services.absence_service import AbsenceService
from payroll_admin.services.employee_service import EmployeeService
from payroll_admin.services.incentive_service import IncentiveService
from payroll_admin.services.salary_service import SalaryService

router = APIRouter(prefix="/employees", tags=["employees"])


# ============================================================================
# Employees
# ============================================================================


@router.get("", response_model=list[EmployeeResponse])
async def list_employees(
    db: DbSession,
    _: AnyRole,
    department_id: UUID | None = None,
    employment_status: EmploymentStatus | None = None,
) -> list[EmployeeResponse]:
    employees = await EmployeeService(db).list_employees(department_id, employment_status)
    return [EmployeeResponse.model_validate(e) for e in employees]


@router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def create_employee(
    db: DbSession, _: PayrollStaff, payload: EmployeeCreate
) -> EmployeeResponse:
    employee = await EmployeeService(db).create_employee(**payload.model_dump())
    await db.commit()
    return EmployeeResponse.model_validate(employee)


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_employee(db: DbSession, _: AnyRole, employee_id: UUID) -> EmployeeResponse:
    employee = await EmployeeService(db).get_employee(employee_id)
    return EmployeeResponse.model_validate(employee)


@router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def update_employee(
    db: DbSession, _: PayrollStaff, employee_id: UUID, payload: EmployeeUpdate
) -> EmployeeResponse:
    employee = await EmployeeService(db).update_employee(employee_id, **payload.model_dump())
    await db.commit()
    return EmployeeResponse.model_validate(employee)


@router.put(
    "/{employee_id}/status",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def set_employment_status(
    db: DbSession, _: PayrollStaff, employee_id: UUID, payload: EmployeeStatusUpdate
) -> EmployeeResponse:
    employee = await EmployeeService(db).set_employment_status(
        employee_id, payload.employment_status
    )
    await db.commit()
    return EmployeeResponse.model_validate(employee)


@router.delete(
    "/{employee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_employee(db: DbSession, _: PayrollStaff, employee_id: UUID) -> None:
    """Soft-delete an employee."""
    await EmployeeService(db).delete_employee(employee_id)
    await db.commit()


@router.post(
    "/{employee_id}/restore",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def restore_employee(
    db: DbSession, _: PayrollStaff, employee_id: UUID
) -> EmployeeResponse:
    employee = await EmployeeService(db).restore_employee(employee_id)
    await db.commit()
    return EmployeeResponse.model_validate(employee)


# ============================================================================
# Salary records
# ============================================================================


@router.get(
    "/{employee_id}/salary-records",
    response_model=list[SalaryRecordResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_salary_history(
    db: DbSession, _: AnyRole, employee_id: UUID
) -> list[SalaryRecordResponse]:
    records = await SalaryService(db).get_salary_history(employee_id)
    return [SalaryRecordResponse.model_validate(r) for r in records]


@router.get(
    "/{employee_id}/salary-records/current",
    response_model=SalaryRecordResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_current_salary(
    db: DbSession, _: AnyRole, employee_id: UUID, as_of: date | None = None
) -> SalaryRecordResponse:
    record = await SalaryService(db).get_current_salary(employee_id, as_of)
    return SalaryRecordResponse.model_validate(record)


@router.post(
    "/{employee_id}/salary-records",
    response_model=SalaryRecordResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def add_salary_record(
    db: DbSession, _: PayrollStaff, employee_id: UUID, payload: SalaryRecordCreate
) -> SalaryRecordResponse:
    record = await SalaryService(db).add_salary_record(employee_id, **payload.model_dump())
    await db.commit()
    return SalaryRecordResponse.model_validate(record)


@router.put(
    "/{employee_id}/salary-records/{salary_record_id}",
    response_model=SalaryRecordResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def update_salary_record(
    db: DbSession,
    _: PayrollStaff,
    employee_id: UUID,
    salary_record_id: UUID,
    payload: SalaryRecordCreate,
) -> SalaryRecordResponse:
    record = await SalaryService(db).update_salary_record(
        employee_id, salary_record_id, **payload.model_dump()
    )
    await db.commit()
    return SalaryRecordResponse.model_validate(record)


@router.delete(
    "/{employee_id}/salary-records/{salary_record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_salary_record(
    db: DbSession, _: PayrollStaff, employee_id: UUID, salary_record_id: UUID
) -> None:
    await SalaryService(db).delete_salary_record(employee_id, salary_record_id)
    await db.commit()


# ============================================================================
# Absence records
# ============================================================================


@router.get(
    "/{employee_id}/absence-records",
    response_model=list[AbsenceRecordResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_absence_records(
    db: DbSession, _: AnyRole, employee_id: UUID, year: int | None = None
) -> list[AbsenceRecordResponse]:
    records = await AbsenceService(db).list_absences(employee_id, year)
    return [AbsenceRecordResponse.model_validate(r) for r in records]


@router.post(
    "/{employee_id}/absence-records",
    response_model=AbsenceRecordResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def record_absence(
    db: DbSession, _: PayrollStaff, employee_id: UUID, payload: AbsenceRecordCreate
) -> AbsenceRecordResponse:
    record = await AbsenceService(db).record_absence(employee_id, **payload.model_dump())
    await db.commit()
    return AbsenceRecordResponse.model_validate(record)


@router.put(
    "/{employee_id}/absence-records/{absence_record_id}",
    response_model=AbsenceRecordResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def update_absence_record(
    db: DbSession,
    _: PayrollStaff,
    employee_id: UUID,
    absence_record_id: UUID,
    payload: AbsenceRecordUpdate,
) -> AbsenceRecordResponse:
    record = await AbsenceService(db).update_absence(
        absence_record_id, payload.absence_days, payload.reason, employee_id=employee_id
    )
    await db.commit()
    return AbsenceRecordResponse.model_validate(record)


@router.delete(
    "/{employee_id}/absence-records/{absence_record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_absence_record(
    db: DbSession, _: PayrollStaff, employee_id: UUID, absence_record_id: UUID
) -> None:
    await AbsenceService(db).delete_absence(absence_record_id, employee_id)
    await db.commit()


# ============================================================================
# Incentives
# ============================================================================


@router.get(
    "/{employee_id}/incentives",
    response_model=list[IncentiveResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_incentives(
    db: DbSession,
    _: AnyRole,
    employee_id: UUID,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[IncentiveResponse]:
    incentives = await IncentiveService(db).list_incentives(employee_id, start_date, end_date)
    return [IncentiveResponse.model_validate(i) for i in incentives]


@router.post(
    "/{employee_id}/incentives",
    response_model=IncentiveResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def grant_incentive(
    db: DbSession, _: PayrollStaff, employee_id: UUID, payload: IncentiveCreate
) -> IncentiveResponse:
    incentive = await IncentiveService(db).grant_incentive(employee_id, **payload.model_dump())
    await db.commit()
    return IncentiveResponse.model_validate(incentive)


@router.put(
    "/{employee_id}/incentives/{incentive_id}",
    response_model=IncentiveResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def update_incentive(
    db: DbSession,
    _: PayrollStaff,
    employee_id: UUID,
    incentive_id: UUID,
    payload: IncentiveCreate,
) -> IncentiveResponse:
    incentive = await IncentiveService(db).update_incentive(
        incentive_id, employee_id=employee_id, **payload.model_dump()
    )
    await db.commit()
    return IncentiveResponse.model_validate(incentive)


@router.delete(
    "/{employee_id}/incentives/{incentive_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_incentive(
    db: DbSession, _: PayrollStaff, employee_id: UUID, incentive_id: UUID
) -> None:
    await IncentiveService(db).delete_incentive(incentive_id, employee_id)
    await db.commit()
