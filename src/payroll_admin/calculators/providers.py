"""Read-only data access used by the calculation engine."""

from __future__ import annotations

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_admin.exceptions import NotFoundError
from payroll_admin.models import AbsenceRecord, Employee, EmploymentStatus


class EmployeeProvider:
    """Loads employees with their department and job grade."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, employee_id: UUID) -> Employee | None:
        """Get a non-deleted employee, or None."""
        result = await self.session.execute(
            select(Employee)
            .options(
                selectinload(Employee.department),
                selectinload(Employee.job_grade),
            )
            .where(
                Employee.employee_id == employee_id,
                Employee.is_deleted.is_(False),
            )
        )
        return result.scalar_one_or_none()

    async def require(self, employee_id: UUID) -> Employee:
        employee = await self.get(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    async def list_active(self, department_id: UUID | None = None) -> Sequence[Employee]:
        """List employees eligible for payroll, ordered by employee number."""
        query = (
            select(Employee)
            .options(
                selectinload(Employee.department),
                selectinload(Employee.job_grade),
            )
            .where(
                Employee.is_deleted.is_(False),
                Employee.employment_status == EmploymentStatus.ACTIVE.value,
            )
        )
        if department_id is not None:
            query = query.where(Employee.department_id == department_id)
        result = await self.session.execute(query.order_by(Employee.employee_number))
        return result.scalars().all()


class AbsenceRecordProvider:
    """Looks up monthly absence records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, employee_id: UUID, year: int, month: int) -> AbsenceRecord | None:
        result = await self.session.execute(
            select(AbsenceRecord).where(
                AbsenceRecord.employee_id == employee_id,
                AbsenceRecord.year == year,
                AbsenceRecord.month == month,
            )
        )
        return result.scalar_one_or_none()

    async def for_period(self, year: int, month: int) -> dict[UUID, AbsenceRecord]:
        """All records of a period keyed by employee id."""
        result = await self.session.execute(
            select(AbsenceRecord).where(
                AbsenceRecord.year == year,
                AbsenceRecord.month == month,
            )
        )
        return {record.employee_id: record for record in result.scalars().all()}
