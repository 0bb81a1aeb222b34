"""Tabular payroll reports.

Reports produce plain rows; rendering them to CSV, PDF or a UI is left to
the caller.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.calculators.engine import (
    PayrollCalculator,
    last_day_of_month,
    percentage_of,
    validate_period,
)
from payroll_admin.calculators.matchers import years_of_service
from payroll_admin.calculators.providers import AbsenceRecordProvider, EmployeeProvider
from payroll_admin.calculators.salary_resolver import pick_current_salary
from payroll_admin.exceptions import PayrollAdminError
from payroll_admin.models import Employee, PayrollSnapshot, SalaryRecord

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class AttendanceReportRow:
    employee_id: UUID
    employee_number: str
    employee_name: str
    department_name: str
    base_salary: Decimal
    absence_days: int
    adjustment_percentage: Decimal | None
    adjustment_amount: Decimal


@dataclass(frozen=True)
class IncentiveReportRow:
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


@dataclass(frozen=True)
class SalaryReportRow:
    employee_id: UUID
    employee_number: str
    employee_name: str
    department_name: str
    job_grade_name: str
    base_salary: Decimal
    gross_salary: Decimal
    has_payroll_record: bool


@dataclass
class SalarySummary:
    """Totals over a group of salary report rows."""

    employee_count: int = 0
    total_base_salary: Decimal = ZERO
    total_gross_salary: Decimal = ZERO

    @property
    def average_gross_salary(self) -> Decimal:
        if self.employee_count == 0:
            return ZERO
        return (self.total_gross_salary / self.employee_count).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )

    def add(self, row: SalaryReportRow) -> None:
        self.employee_count += 1
        self.total_base_salary += row.base_salary
        self.total_gross_salary += row.gross_salary


@dataclass
class SalaryReport:
    year: int
    month: int
    rows: list[SalaryReportRow] = field(default_factory=list)
    summary: SalarySummary = field(default_factory=SalarySummary)
    department_summaries: dict[str, SalarySummary] = field(default_factory=dict)


@dataclass(frozen=True)
class DirectoryRow:
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


def _sort_key(employee: Employee) -> tuple[str, str, str]:
    return (employee.department.name, employee.last_name, employee.first_name)


class ReportingService:
    """Builds attendance, incentive, salary and directory reports."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.employees = EmployeeProvider(session)
        self.absence_records = AbsenceRecordProvider(session)
        self.calculator = PayrollCalculator(session)

    async def attendance_report(
        self, year: int, month: int, department_id: UUID | None = None
    ) -> list[AttendanceReportRow]:
        """Absence days and their salary effect for one month.

        Employees without a salary effective by month end are left out.
        """
        validate_period(year, month)
        employees = await self.employees.list_active(department_id)
        salaries = await self._current_salaries(employees, last_day_of_month(year, month))
        absences = await self.absence_records.for_period(year, month)

        rows = []
        for employee in sorted(employees, key=_sort_key):
            base = salaries.get(employee.employee_id)
            if base is None:
                continue
            absence = absences.get(employee.employee_id)
            percentage = absence.adjustment_percentage if absence else None
            rows.append(
                AttendanceReportRow(
                    employee_id=employee.employee_id,
                    employee_number=employee.employee_number,
                    employee_name=employee.full_name,
                    department_name=employee.department.name,
                    base_salary=base,
                    absence_days=absence.absence_days if absence else 0,
                    adjustment_percentage=percentage,
                    adjustment_amount=percentage_of(base, percentage),
                )
            )
        return rows

    async def incentive_report(
        self, year: int, month: int, department_id: UUID | None = None
    ) -> list[IncentiveReportRow]:
        """Incentive breakdown, read from snapshots or computed when missing."""
        validate_period(year, month)
        employees = await self.employees.list_active(department_id)
        snapshots = await self._snapshots_by_employee(year, month)
        tables = None

        rows = []
        for employee in sorted(employees, key=_sort_key):
            snapshot = snapshots.get(employee.employee_id)
            if snapshot is not None:
                figures = snapshot
            else:
                if tables is None:
                    tables = await self.calculator.load_rate_tables()
                try:
                    figures = await self.calculator.calculate_for_employee(
                        employee, year, month, tables
                    )
                except PayrollAdminError as e:
                    logger.debug(
                        "Leaving %s out of incentive report: %s",
                        employee.employee_number,
                        e,
                    )
                    continue

            attendance = figures.attendance_adjustment_amount
            rows.append(
                IncentiveReportRow(
                    employee_id=employee.employee_id,
                    employee_number=employee.employee_number,
                    employee_name=employee.full_name,
                    department_name=employee.department.name,
                    base_salary=figures.base_salary,
                    department_incentive_amount=figures.department_incentive_amount,
                    service_years_incentive_amount=figures.service_years_incentive_amount,
                    attendance_adjustment_amount=attendance,
                    total_incentives=(
                        figures.department_incentive_amount
                        + figures.service_years_incentive_amount
                        + max(attendance, ZERO)
                    ),
                    total_deductions=abs(min(attendance, ZERO)),
                    gross_salary=figures.gross_salary,
                    from_snapshot=snapshot is not None,
                )
            )
        return rows

    async def salary_report(
        self, year: int, month: int, department_id: UUID | None = None
    ) -> SalaryReport:
        """Base and gross salary per employee with overall and department totals.

        Gross comes from the month's snapshot when one exists, otherwise it is
        reported as the base salary.
        """
        validate_period(year, month)
        employees = await self.employees.list_active(department_id)
        salaries = await self._current_salaries(employees, last_day_of_month(year, month))
        snapshots = await self._snapshots_by_employee(year, month)

        report = SalaryReport(year=year, month=month)
        for employee in sorted(employees, key=_sort_key):
            snapshot = snapshots.get(employee.employee_id)
            if snapshot is not None:
                base, gross = snapshot.base_salary, snapshot.gross_salary
            elif employee.employee_id in salaries:
                base = gross = salaries[employee.employee_id]
            else:
                continue

            row = SalaryReportRow(
                employee_id=employee.employee_id,
                employee_number=employee.employee_number,
                employee_name=employee.full_name,
                department_name=employee.department.name,
                job_grade_name=employee.job_grade.name,
                base_salary=base,
                gross_salary=gross,
                has_payroll_record=snapshot is not None,
            )
            report.rows.append(row)
            report.summary.add(row)
            report.department_summaries.setdefault(row.department_name, SalarySummary()).add(row)
        return report

    async def employee_directory(
        self, department_id: UUID | None = None, as_of: date | None = None
    ) -> list[DirectoryRow]:
        reference = as_of or date.today()
        employees = await self.employees.list_active(department_id)
        return [
            DirectoryRow(
                employee_id=e.employee_id,
                employee_number=e.employee_number,
                employee_name=e.full_name,
                email=e.email,
                phone=e.phone,
                department_name=e.department.name,
                job_grade_name=e.job_grade.name,
                hire_date=e.hire_date,
                years_of_service=years_of_service(e.hire_date, reference),
                employment_status=e.employment_status,
            )
            for e in sorted(employees, key=_sort_key)
        ]

    async def _current_salaries(
        self, employees: Sequence[Employee], as_of_date: date
    ) -> dict[UUID, Decimal]:
        if not employees:
            return {}
        result = await self.session.execute(
            select(SalaryRecord).where(
                SalaryRecord.employee_id.in_([e.employee_id for e in employees]),
                SalaryRecord.effective_date <= as_of_date,
            )
        )
        history: dict[UUID, list[SalaryRecord]] = defaultdict(list)
        for record in result.scalars().all():
            history[record.employee_id].append(record)

        salaries = {}
        for employee_id, records in history.items():
            current = pick_current_salary(records, as_of_date)
            if current is not None:
                salaries[employee_id] = current.base_salary
        return salaries

    async def _snapshots_by_employee(
        self, year: int, month: int
    ) -> dict[UUID, PayrollSnapshot]:
        result = await self.session.execute(
            select(PayrollSnapshot).where(
                PayrollSnapshot.year == year,
                PayrollSnapshot.month == month,
            )
        )
        return {s.employee_id: s for s in result.scalars().all()}
