"""Employee administration with soft delete."""

from __future__ import annotations

import logging
from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_admin.calculators.providers import EmployeeProvider
from payroll_admin.exceptions import BusinessRuleViolationError, NotFoundError, ValidationFailure
from payroll_admin.models import Department, Employee, EmploymentStatus, JobGrade

logger = logging.getLogger(__name__)

MINIMUM_AGE = 18


def _age_on(date_of_birth: date, on: date) -> int:
    years = on.year - date_of_birth.year
    if (on.month, on.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return years


def _validate_details(
    errors: list[str],
    first_name: str,
    last_name: str,
    email: str,
    hire_date: date,
    date_of_birth: date | None,
    phone: str | None,
    address: str | None,
) -> None:
    """Collect field errors shared by create and update; raise if any were found."""
    if not 1 <= len(first_name.strip()) <= 50:
        errors.append("First name must be between 1 and 50 characters")
    if not 1 <= len(last_name.strip()) <= 50:
        errors.append("Last name must be between 1 and 50 characters")
    if "@" not in email or len(email) > 100:
        errors.append("A valid email address of at most 100 characters is required")
    if phone is not None and len(phone) > 20:
        errors.append("Phone number cannot exceed 20 characters")
    if address is not None and len(address) > 200:
        errors.append("Address cannot exceed 200 characters")
    if hire_date > date.today():
        errors.append("Hire date cannot be in the future")
    if date_of_birth is not None and _age_on(date_of_birth, hire_date) < MINIMUM_AGE:
        errors.append(f"Employee must be at least {MINIMUM_AGE} years old at hire")
    if errors:
        raise ValidationFailure("Invalid employee", errors)


class EmployeeService:
    """Creates, updates, lists and soft-deletes employees."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.provider = EmployeeProvider(session)

    async def get_employee(self, employee_id: UUID) -> Employee:
        return await self.provider.require(employee_id)

    async def list_employees(
        self,
        department_id: UUID | None = None,
        status: EmploymentStatus | None = None,
    ) -> Sequence[Employee]:
        query = (
            select(Employee)
            .options(selectinload(Employee.department), selectinload(Employee.job_grade))
            .where(Employee.is_deleted.is_(False))
        )
        if department_id is not None:
            query = query.where(Employee.department_id == department_id)
        if status is not None:
            query = query.where(Employee.employment_status == status.value)
        result = await self.session.execute(
            query.order_by(Employee.last_name, Employee.first_name)
        )
        return result.scalars().all()

    async def create_employee(
        self,
        employee_number: str,
        first_name: str,
        last_name: str,
        email: str,
        hire_date: date,
        department_id: UUID,
        job_grade_id: UUID,
        date_of_birth: date | None = None,
        phone: str | None = None,
        address: str | None = None,
        employment_status: EmploymentStatus = EmploymentStatus.ACTIVE,
    ) -> Employee:
        """Create an employee.

        Raises:
            ValidationFailure: On invalid fields
            NotFoundError: If the department or job grade does not exist
            BusinessRuleViolationError: If the employee number or email is taken
        """
        errors: list[str] = []
        if not 1 <= len(employee_number.strip()) <= 20:
            errors.append("Employee number must be between 1 and 20 characters")
        _validate_details(
            errors, first_name, last_name, email, hire_date, date_of_birth, phone, address
        )
        await self._require_placement(department_id, job_grade_id)

        # Uniqueness spans soft-deleted rows, which keep their number and email
        clash = await self.session.scalar(
            select(Employee.employee_id).where(
                or_(
                    Employee.employee_number == employee_number.strip(),
                    Employee.email == email.strip().lower(),
                )
            )
        )
        if clash is not None:
            raise BusinessRuleViolationError(
                "UniqueEmployee", "Employee number or email is already in use"
            )

        employee = Employee(
            employee_number=employee_number.strip(),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email.strip().lower(),
            phone=phone,
            address=address,
            date_of_birth=date_of_birth,
            hire_date=hire_date,
            employment_status=employment_status.value,
            department_id=department_id,
            job_grade_id=job_grade_id,
        )
        self.session.add(employee)
        await self.session.flush()
        logger.info("Created employee %s", employee.employee_number)
        return await self.provider.require(employee.employee_id)

    async def update_employee(
        self,
        employee_id: UUID,
        first_name: str,
        last_name: str,
        email: str,
        department_id: UUID,
        job_grade_id: UUID,
        employment_status: EmploymentStatus,
        date_of_birth: date | None = None,
        phone: str | None = None,
        address: str | None = None,
    ) -> Employee:
        """Replace an employee's details.

        The employee number and hire date are fixed at creation. Moving an
        employee to another department or grade does not touch salary history.

        Raises:
            NotFoundError: If the employee, department or job grade does not exist
            ValidationFailure: On invalid fields
            BusinessRuleViolationError: If the email belongs to another employee
        """
        employee = await self.provider.require(employee_id)
        _validate_details(
            [], first_name, last_name, email, employee.hire_date, date_of_birth, phone, address
        )
        department, job_grade = await self._require_placement(department_id, job_grade_id)

        email = email.strip().lower()
        if email != employee.email:
            clash = await self.session.scalar(
                select(Employee.employee_id).where(
                    Employee.email == email,
                    Employee.employee_id != employee_id,
                )
            )
            if clash is not None:
                raise BusinessRuleViolationError(
                    "UniqueEmployee", "Email is already in use by another employee"
                )

        employee.first_name = first_name.strip()
        employee.last_name = last_name.strip()
        employee.email = email
        employee.date_of_birth = date_of_birth
        employee.phone = phone
        employee.address = address
        employee.employment_status = employment_status.value
        employee.department = department
        employee.job_grade = job_grade
        await self.session.flush()
        logger.info("Updated employee %s", employee.employee_number)
        return employee

    async def set_employment_status(
        self, employee_id: UUID, status: EmploymentStatus
    ) -> Employee:
        employee = await self.provider.require(employee_id)
        employee.employment_status = status.value
        await self.session.flush()
        return employee

    async def delete_employee(self, employee_id: UUID) -> None:
        """Soft delete: the row stays, every query filters it out."""
        employee = await self.provider.require(employee_id)
        employee.is_deleted = True
        await self.session.flush()
        logger.info("Soft-deleted employee %s", employee.employee_number)

    async def restore_employee(self, employee_id: UUID) -> Employee:
        result = await self.session.execute(
            select(Employee).where(
                Employee.employee_id == employee_id,
                Employee.is_deleted.is_(True),
            )
        )
        employee = result.scalar_one_or_none()
        if employee is None:
            raise NotFoundError("DeletedEmployee", employee_id)
        employee.is_deleted = False
        await self.session.flush()
        return await self.provider.require(employee_id)

    async def _require_placement(
        self, department_id: UUID, job_grade_id: UUID
    ) -> tuple[Department, JobGrade]:
        department = await self.session.get(Department, department_id)
        if department is None:
            raise NotFoundError("Department", department_id)
        job_grade = await self.session.get(JobGrade, job_grade_id)
        if job_grade is None:
            raise NotFoundError("JobGrade", job_grade_id)
        return department, job_grade
