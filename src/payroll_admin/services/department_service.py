"""Department and job grade administration."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.exceptions import BusinessRuleViolationError, NotFoundError, ValidationFailure
from payroll_admin.models import Department, DepartmentIncentiveHistory, Employee, JobGrade


def _validate_incentive(percentage: Decimal | None, errors: list[str]) -> None:
    if percentage is not None and not (Decimal("0") <= percentage <= Decimal("100")):
        errors.append("Incentive percentage must be between 0 and 100")


class DepartmentService:
    """Creates departments and maintains their incentive percentage.

    The current percentage and its history row are written in the same
    transaction; history rows are never updated or deleted.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_department(self, department_id: UUID) -> Department:
        department = await self.session.get(Department, department_id)
        if department is None:
            raise NotFoundError("Department", department_id)
        return department

    async def list_departments(self) -> Sequence[Department]:
        result = await self.session.execute(select(Department).order_by(Department.name))
        return result.scalars().all()

    async def create_department(
        self,
        name: str,
        description: str | None = None,
        incentive_percentage: Decimal | None = None,
    ) -> Department:
        name = name.strip()
        errors: list[str] = []
        if not 2 <= len(name) <= 100:
            errors.append("Department name must be between 2 and 100 characters")
        _validate_incentive(incentive_percentage, errors)
        if errors:
            raise ValidationFailure("Invalid department", errors)
        await self._ensure_unique_name(name)

        department = Department(name=name, description=description)
        self.session.add(department)
        await self.session.flush()

        if incentive_percentage is not None:
            self._set_incentive(department, incentive_percentage, date.today())
            await self.session.flush()
        return department

    async def rename_department(
        self,
        department_id: UUID,
        name: str,
        description: str | None = None,
    ) -> Department:
        department = await self.get_department(department_id)
        name = name.strip()
        if not 2 <= len(name) <= 100:
            raise ValidationFailure("Department name must be between 2 and 100 characters")
        await self._ensure_unique_name(name, exclude_id=department_id)

        department.name = name
        department.description = description
        await self.session.flush()
        return department

    async def delete_department(self, department_id: UUID) -> None:
        department = await self.get_department(department_id)
        employee_count = await self.session.scalar(
            # Soft-deleted employees still hold the foreign key
            select(func.count())
            .select_from(Employee)
            .where(Employee.department_id == department_id)
        )
        if employee_count:
            raise BusinessRuleViolationError(
                "DepartmentInUse",
                "Department has associated employees and cannot be deleted",
            )
        await self.session.delete(department)
        await self.session.flush()

    async def update_incentive(
        self,
        department_id: UUID,
        incentive_percentage: Decimal,
        effective_date: date | None = None,
    ) -> Department:
        """Set a new current percentage and append it to the history."""
        errors: list[str] = []
        _validate_incentive(incentive_percentage, errors)
        if errors:
            raise ValidationFailure("Invalid incentive", errors)

        department = await self.get_department(department_id)
        self._set_incentive(department, incentive_percentage, effective_date or date.today())
        await self.session.flush()
        return department

    async def get_incentive_history(
        self, department_id: UUID
    ) -> Sequence[DepartmentIncentiveHistory]:
        await self.get_department(department_id)
        result = await self.session.execute(
            select(DepartmentIncentiveHistory)
            .where(DepartmentIncentiveHistory.department_id == department_id)
            .order_by(
                DepartmentIncentiveHistory.effective_date,
                DepartmentIncentiveHistory.created_at,
            )
        )
        return result.scalars().all()

    def _set_incentive(
        self, department: Department, percentage: Decimal, effective_date: date
    ) -> None:
        department.incentive_percentage = percentage
        department.incentive_set_date = effective_date
        self.session.add(
            DepartmentIncentiveHistory(
                department_id=department.department_id,
                incentive_percentage=percentage,
                effective_date=effective_date,
            )
        )

    async def _ensure_unique_name(self, name: str, exclude_id: UUID | None = None) -> None:
        query = select(Department.department_id).where(
            func.lower(Department.name) == name.lower()
        )
        if exclude_id is not None:
            query = query.where(Department.department_id != exclude_id)
        if await self.session.scalar(query) is not None:
            raise BusinessRuleViolationError(
                "UniqueDepartmentName", f"Department '{name}' already exists"
            )


class JobGradeService:
    """Job grade administration."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_job_grade(self, job_grade_id: UUID) -> JobGrade:
        job_grade = await self.session.get(JobGrade, job_grade_id)
        if job_grade is None:
            raise NotFoundError("JobGrade", job_grade_id)
        return job_grade

    async def list_job_grades(self) -> Sequence[JobGrade]:
        result = await self.session.execute(select(JobGrade).order_by(JobGrade.min_salary))
        return result.scalars().all()

    async def create_job_grade(
        self,
        name: str,
        min_salary: Decimal,
        max_salary: Decimal,
        description: str | None = None,
    ) -> JobGrade:
        name = name.strip()
        self._validate(name, min_salary, max_salary, description)
        await self._ensure_unique_name(name)

        job_grade = JobGrade(
            name=name,
            description=description,
            min_salary=min_salary,
            max_salary=max_salary,
        )
        self.session.add(job_grade)
        await self.session.flush()
        return job_grade

    async def update_job_grade(
        self,
        job_grade_id: UUID,
        name: str,
        min_salary: Decimal,
        max_salary: Decimal,
        description: str | None = None,
    ) -> JobGrade:
        """Rename or re-band a grade.

        Existing salary records are not re-checked against the new band; the
        band applies to salary records written from now on.
        """
        job_grade = await self.get_job_grade(job_grade_id)
        name = name.strip()
        self._validate(name, min_salary, max_salary, description)
        await self._ensure_unique_name(name, exclude_id=job_grade_id)

        job_grade.name = name
        job_grade.description = description
        job_grade.min_salary = min_salary
        job_grade.max_salary = max_salary
        await self.session.flush()
        return job_grade

    async def delete_job_grade(self, job_grade_id: UUID) -> None:
        job_grade = await self.get_job_grade(job_grade_id)
        in_use = await self.session.scalar(
            # Soft-deleted employees still hold the foreign key
            select(func.count())
            .select_from(Employee)
            .where(Employee.job_grade_id == job_grade_id)
        )
        if in_use:
            raise BusinessRuleViolationError(
                "JobGradeInUse", "Job grade has associated employees and cannot be deleted"
            )
        await self.session.delete(job_grade)
        await self.session.flush()

    def _validate(
        self,
        name: str,
        min_salary: Decimal,
        max_salary: Decimal,
        description: str | None,
    ) -> None:
        errors: list[str] = []
        if not 1 <= len(name) <= 50:
            errors.append("Job grade name must be between 1 and 50 characters")
        if description is not None and len(description) > 500:
            errors.append("Description cannot exceed 500 characters")
        if min_salary < 0:
            errors.append("Minimum salary cannot be negative")
        if max_salary < min_salary:
            errors.append("Maximum salary must not be less than minimum salary")
        if errors:
            raise ValidationFailure("Invalid job grade", errors)

    async def _ensure_unique_name(self, name: str, exclude_id: UUID | None = None) -> None:
        query = select(JobGrade.job_grade_id).where(func.lower(JobGrade.name) == name.lower())
        if exclude_id is not None:
            query = query.where(JobGrade.job_grade_id != exclude_id)
        if await self.session.scalar(query) is not None:
            raise BusinessRuleViolationError(
                "UniqueJobGradeName", f"Job grade '{name}' already exists"
            )
