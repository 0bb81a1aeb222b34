"""Salary history administration."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.calculators.providers import EmployeeProvider
from payroll_admin.calculators.salary_resolver import SalaryResolver
from payroll_admin.exceptions import BusinessRuleViolationError, NotFoundError, ValidationFailure
from payroll_admin.models import Employee, SalaryRecord


class SalaryService:
    """Adds, corrects and removes salary records.

    An employee has at most one record per effective date, and every base
    salary must fall inside the employee's job grade band.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.employees = EmployeeProvider(session)
        self.resolver = SalaryResolver(session)

    async def add_salary_record(
        self,
        employee_id: UUID,
        base_salary: Decimal,
        effective_date: date,
        notes: str | None = None,
    ) -> SalaryRecord:
        self._validate(base_salary, notes)
        employee = await self.employees.require(employee_id)
        self._check_band(employee, base_salary)
        await self._check_unique_date(employee_id, effective_date)

        record = SalaryRecord(
            employee_id=employee_id,
            base_salary=base_salary,
            effective_date=effective_date,
            notes=notes,
        )
        self.session.add(record)
        await self.session.flush()
        return record

    async def update_salary_record(
        self,
        employee_id: UUID,
        salary_record_id: UUID,
        base_salary: Decimal,
        effective_date: date,
        notes: str | None = None,
    ) -> SalaryRecord:
        """Correct a salary record under the same rules as a new one."""
        self._validate(base_salary, notes)
        record = await self._get_record(employee_id, salary_record_id)
        employee = await self.employees.require(employee_id)
        self._check_band(employee, base_salary)
        if effective_date != record.effective_date:
            await self._check_unique_date(employee_id, effective_date, salary_record_id)

        record.base_salary = base_salary
        record.effective_date = effective_date
        record.notes = notes
        await self.session.flush()
        return record

    async def get_salary_history(self, employee_id: UUID) -> list[SalaryRecord]:
        await self.employees.require(employee_id)
        return await self.resolver.get_history(employee_id)

    async def get_current_salary(
        self, employee_id: UUID, as_of_date: date | None = None
    ) -> SalaryRecord:
        await self.employees.require(employee_id)
        return await self.resolver.get_current_salary(employee_id, as_of_date or date.today())

    async def delete_salary_record(self, employee_id: UUID, salary_record_id: UUID) -> None:
        record = await self._get_record(employee_id, salary_record_id)

        remaining = await self.session.scalar(
            select(func.count())
            .select_from(SalaryRecord)
            .where(SalaryRecord.employee_id == employee_id)
        )
        if remaining == 1:
            raise BusinessRuleViolationError(
                "SalaryHistoryRequired", "Cannot delete the employee's only salary record"
            )
        await self.session.delete(record)
        await self.session.flush()

    def _validate(self, base_salary: Decimal, notes: str | None) -> None:
        errors: list[str] = []
        if base_salary <= 0:
            errors.append("Base salary must be greater than 0")
        if notes is not None and len(notes) > 500:
            errors.append("Notes cannot exceed 500 characters")
        if errors:
            raise ValidationFailure("Invalid salary record", errors)

    def _check_band(self, employee: Employee, base_salary: Decimal) -> None:
        grade = employee.job_grade
        if not grade.min_salary <= base_salary <= grade.max_salary:
            raise BusinessRuleViolationError(
                "SalaryWithinJobGrade",
                f"Base salary {base_salary} is outside job grade '{grade.name}' "
                f"range {grade.min_salary}-{grade.max_salary}",
            )

    async def _check_unique_date(
        self,
        employee_id: UUID,
        effective_date: date,
        exclude_id: UUID | None = None,
    ) -> None:
        query = select(SalaryRecord.salary_record_id).where(
            SalaryRecord.employee_id == employee_id,
            SalaryRecord.effective_date == effective_date,
        )
        if exclude_id is not None:
            query = query.where(SalaryRecord.salary_record_id != exclude_id)
        if await self.session.scalar(query) is not None:
            raise BusinessRuleViolationError(
                "UniqueSalaryEffectiveDate",
                f"Employee already has a salary record effective {effective_date}",
            )

    async def _get_record(self, employee_id: UUID, salary_record_id: UUID) -> SalaryRecord:
        record = await self.session.get(SalaryRecord, salary_record_id)
        if record is None or record.employee_id != employee_id:
            raise NotFoundError("SalaryRecord", salary_record_id)
        return record
