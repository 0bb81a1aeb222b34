"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from payroll_admin.models import EmploymentStatus, IncentiveType


class ErrorResponse(BaseModel):
    """Error response body."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None


# ============================================================================
# Payroll schemas
# ============================================================================


class CalculateRequest(BaseModel):
    """Request to calculate and store one employee's snapshot."""

    employee_id: UUID
    year: int = Field(ge=1, le=9999)
    month: int = Field(ge=1, le=12)
    regenerate: bool = False


class CalculationPreviewResponse(BaseModel):
    """Calculated gross pay that has not been stored."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    year: int
    month: int
    as_of_date: date
    base_salary: Decimal
    years_of_service: int
    department_incentive_percentage: Decimal | None
    department_incentive_amount: Decimal
    service_years_incentive_percentage: Decimal | None
    service_years_incentive_amount: Decimal
    attendance_adjustment_percentage: Decimal | None
    attendance_adjustment_amount: Decimal
    absence_days: int | None
    gross_salary: Decimal
    service_bracket_name: str | None = None
    absence_threshold_name: str | None = None


class SnapshotResponse(BaseModel):
    """Stored payroll snapshot."""

    model_config = ConfigDict(from_attributes=True)

    payroll_snapshot_id: UUID
    employee_id: UUID
    year: int
    month: int
    base_salary: Decimal
    department_incentive_percentage: Decimal | None
    department_incentive_amount: Decimal
    service_years_incentive_percentage: Decimal | None
    service_years_incentive_amount: Decimal
    attendance_adjustment_percentage: Decimal | None
    attendance_adjustment_amount: Decimal
    gross_salary: Decimal
    absence_days: int | None
    years_of_service: int
    calculation_version: str
    inputs_fingerprint: str
    calculated_at: datetime


class SnapshotListResponse(BaseModel):
    """List of payroll snapshots."""

    items: list[SnapshotResponse]
    total: int


class EmployeeFailureResponse(BaseModel):
    """Employee skipped by a batch run."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    employee_number: str
    error: str
    code: str


class BatchCalculationResponse(BaseModel):
    """Outcome of calculating a period for all active employees."""

    model_config = ConfigDict(from_attributes=True)

    year: int
    month: int
    total_employees: int
    success_count: int
    failure_count: int
    cancelled: bool
    total_gross: Decimal
    snapshots: list[SnapshotResponse]
    failures: list[EmployeeFailureResponse]


class GenerationResponse(BatchCalculationResponse):
    """Outcome of regenerating a period."""

    success: bool


# ============================================================================
# Rule configuration schemas
# ============================================================================


class ServiceBracketRequest(BaseModel):
    """Create or replace a service bracket."""

    name: str = Field(min_length=1, max_length=100)
    min_years_of_service: int
    max_years_of_service: int | None = None
    incentive_percentage: Decimal
    description: str | None = Field(default=None, max_length=500)
    is_active: bool = True


class ServiceBracketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    service_bracket_id: UUID
    name: str
    min_years_of_service: int
    max_years_of_service: int | None
    incentive_percentage: Decimal
    description: str | None
    is_active: bool


class AbsenceThresholdRequest(BaseModel):
    """Create or replace an absence threshold."""

    name: str = Field(min_length=1, max_length=50)
    min_absence_days: int
    max_absence_days: int | None = None
    adjustment_percentage: Decimal
    description: str | None = Field(default=None, max_length=500)
    is_active: bool = True


class AbsenceThresholdResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    absence_threshold_id: UUID
    name: str
    min_absence_days: int
    max_absence_days: int | None
    adjustment_percentage: Decimal
    description: str | None
    is_active: bool


# ============================================================================
# Organization schemas
# ============================================================================


class DepartmentCreate(BaseModel):
    name: str
    description: str | None = None
    incentive_percentage: Decimal | None = None


class DepartmentUpdate(BaseModel):
    name: str
    description: str | None = None


class IncentiveUpdate(BaseModel):
    """New current incentive percentage for a department."""

    incentive_percentage: Decimal
    effective_date: date | None = None


class DepartmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    department_id: UUID
    name: str
    description: str | None
    incentive_percentage: Decimal | None
    incentive_set_date: date | None


class IncentiveHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    history_id: UUID
    department_id: UUID
    incentive_percentage: Decimal
    effective_date: date


class JobGradeCreate(BaseModel):
    name: str
    description: str | None = None
    min_salary: Decimal
    max_salary: Decimal


class JobGradeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    job_grade_id: UUID
    name: str
    description: str | None
    min_salary: Decimal
    max_salary: Decimal


# ============================================================================
# Employee schemas
# ============================================================================


class EmployeeCreate(BaseModel):
    employee_number: str
    first_name: str
    last_name: str
    email: str
    hire_date: date
    department_id: UUID
    job_grade_id: UUID
    date_of_birth: date | None = None
    phone: str | None = None
    address: str | None = None
    employment_status: EmploymentStatus = EmploymentStatus.ACTIVE


class EmployeeUpdate(BaseModel):
    """Full replacement of an employee's editable details."""

    first_name: str
    last_name: str
    email: str
    department_id: UUID
    job_grade_id: UUID
    employment_status: EmploymentStatus
    date_of_birth: date | None = None
    phone: str | None = None
    address: str | None = None


class EmployeeStatusUpdate(BaseModel):
    employment_status: EmploymentStatus


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    employee_number: str
    first_name: str
    last_name: str
    email: str
    phone: str | None
    hire_date: date
    employment_status: str
    department_id: UUID
    job_grade_id: UUID


class SalaryRecordCreate(BaseModel):
    base_salary: Decimal
    effective_date: date
    notes: str | None = None


class SalaryRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    salary_record_id: UUID
    employee_id: UUID
    base_salary: Decimal
    effective_date: date
    notes: str | None


class AbsenceRecordCreate(BaseModel):
    year: int
    month: int
    absence_days: int
    reason: str | None = None


class AbsenceRecordUpdate(BaseModel):
    absence_days: int
    reason: str | None = None


class AbsenceRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    absence_record_id: UUID
    employee_id: UUID
    year: int
    month: int
    absence_days: int
    adjustment_percentage: Decimal | None
    reason: str | None


class IncentiveCreate(BaseModel):
    title: str
    amount: Decimal
    incentive_date: date
    incentive_type: IncentiveType
    description: str | None = None
    is_taxable: bool = True


class IncentiveResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    incentive_id: UUID
    employee_id: UUID
    title: str
    description: str | None
    amount: Decimal
    incentive_date: date
    incentive_type: str
    is_taxable: bool


# ============================================================================
# Report schemas
# ============================================================================


class AttendanceReportRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    employee_number: str
    employee_name: str
    department_name: str
    base_salary: Decimal
    absence_days: int
    adjustment_percentage: Decimal | None
    adjustment_amount: Decimal


class AttendanceReportResponse(BaseModel):
    year: int
    month: int
    rows: list[AttendanceReportRowResponse]


class IncentiveReportRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    employee_number: str
    employee_name: str
    department_name: str
    base_salary: Decimal
    department_incentive_amount: Decimal
    service_years_incentive_amount: Decimal
    attendance_adjustment_amount: Decimal
    total_incentives: Decimal
    total_deductions: Decimal
    gross_salary: Decimal
    from_snapshot: bool


class IncentiveReportResponse(BaseModel):
    year: int
    month: int
    rows: list[IncentiveReportRowResponse]


class SalaryReportRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    employee_number: str
    employee_name: str
    department_name: str
    job_grade_name: str
    base_salary: Decimal
    gross_salary: Decimal
    has_payroll_record: bool


class SalarySummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_count: int
    total_base_salary: Decimal
    total_gross_salary: Decimal
    average_gross_salary: Decimal


class SalaryReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    year: int
    month: int
    rows: list[SalaryReportRowResponse]
    summary: SalarySummaryResponse
    department_summaries: dict[str, SalarySummaryResponse]


class DirectoryRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    employee_number: str
    employee_name: str
    email: str
    phone: str | None
    department_name: str
    job_grade_name: str
    hire_date: date
    years_of_service: int
    employment_status: str


# ============================================================================
# Dashboard schemas
# ============================================================================


class PayrollSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    year: int
    month: int
    employees_with_payroll: int
    total_gross: Decimal
    average_gross: Decimal


class DashboardStatisticsResponse(BaseModel):
    """Headcounts and the month-over-month change in snapshot payroll."""

    model_config = ConfigDict(from_attributes=True)

    as_of: date
    total_employees: int
    active_employees: int
    total_departments: int
    current_payroll: PayrollSummaryResponse
    previous_payroll: PayrollSummaryResponse
    payroll_change_percentage: Decimal | None
