"""Employee models and the records an employee owns."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_admin.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from payroll_admin.models.organization import Department, JobGrade


class EmploymentStatus(str, Enum):
    """Employment status values."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    TERMINATED = "Terminated"


class IncentiveType(str, Enum):
    """Kinds of one-off incentive payments."""

    BONUS = "Bonus"
    COMMISSION = "Commission"
    ALLOWANCE = "Allowance"
    OTHER = "Other"


class Employee(Base, TimestampMixin):
    """Employee record.

    Soft-deleted rows keep ``is_deleted = True``; every query that reads
    employees filters on it explicitly.
    """

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    address: Mapped[str | None] = mapped_column(String(200), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    hire_date: Mapped[date] = mapped_column(Date, nullable=False)
    employment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EmploymentStatus.ACTIVE.value
    )
    department_id: Mapped[UUID] = mapped_column(
        ForeignKey("department.department_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    job_grade_id: Mapped[UUID] = mapped_column(
        ForeignKey("job_grade.job_grade_id", ondelete="RESTRICT"),
        nullable=False,
    )
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint(
            "employment_status IN ('Active', 'Inactive', 'Terminated')",
            name="employee_status_check",
        ),
    )

    # Relationships
    department: Mapped[Department] = relationship(back_populates="employees")
    job_grade: Mapped[JobGrade] = relationship(back_populates="employees")
    salary_records: Mapped[list[SalaryRecord]] = relationship(back_populates="employee")
    absence_records: Mapped[list[AbsenceRecord]] = relationship(back_populates="employee")
    incentives: Mapped[list[Incentive]] = relationship(back_populates="employee")

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"


class SalaryRecord(Base, TimestampMixin):
    """One entry of an employee's salary history."""

    __tablename__ = "salary_record"

    salary_record_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    base_salary: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "employee_id", "effective_date", name="salary_record_employee_date_unique"
        ),
        CheckConstraint("base_salary > 0", name="salary_record_positive_check"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="salary_records")


class AbsenceRecord(Base, TimestampMixin):
    """Absence days recorded for one employee and month."""

    __tablename__ = "absence_record"

    absence_record_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    absence_days: Mapped[int] = mapped_column(Integer, nullable=False)
    adjustment_percentage: Mapped[Decimal | None] = mapped_column(
        Numeric(5, 2), nullable=True
    )
    reason: Mapped[str | None] = mapped_column(String(200), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "employee_id", "year", "month", name="absence_record_employee_period_unique"
        ),
        CheckConstraint("month BETWEEN 1 AND 12", name="absence_record_month_check"),
        CheckConstraint("absence_days BETWEEN 0 AND 31", name="absence_record_days_check"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="absence_records")


class Incentive(Base, TimestampMixin):
    """One-off incentive payment granted to an employee."""

    __tablename__ = "incentive"

    incentive_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    incentive_date: Mapped[date] = mapped_column(Date, nullable=False)
    incentive_type: Mapped[str] = mapped_column(String(20), nullable=False)
    is_taxable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="incentive_amount_check"),
        CheckConstraint(
            "incentive_type IN ('Bonus', 'Commission', 'Allowance', 'Other')",
            name="incentive_type_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="incentives")
