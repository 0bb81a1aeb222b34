"""Department, incentive history and job grade models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_admin.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from payroll_admin.models.employee import Employee


class JobGrade(Base, TimestampMixin):
    """Job grade with the salary band allowed for its employees."""

    __tablename__ = "job_grade"

    job_grade_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(200), nullable=True)
    min_salary: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    max_salary: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    __table_args__ = (
        CheckConstraint("min_salary >= 0", name="job_grade_min_salary_check"),
        CheckConstraint("max_salary >= min_salary", name="job_grade_band_check"),
    )

    # Relationships
    employees: Mapped[list[Employee]] = relationship(
        back_populates="job_grade", passive_deletes="all"
    )


class Department(Base, TimestampMixin):
    """Department with a single current incentive percentage."""

    __tablename__ = "department"

    department_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    incentive_percentage: Mapped[Decimal | None] = mapped_column(
        Numeric(5, 2), nullable=True
    )
    incentive_set_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "incentive_percentage IS NULL OR "
            "(incentive_percentage >= 0 AND incentive_percentage <= 100)",
            name="department_incentive_range_check",
        ),
    )

    # Relationships
    employees: Mapped[list[Employee]] = relationship(
        back_populates="department", passive_deletes="all"
    )
    incentive_history: Mapped[list[DepartmentIncentiveHistory]] = relationship(
        back_populates="department",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DepartmentIncentiveHistory.effective_date",
    )


class DepartmentIncentiveHistory(Base, TimestampMixin):
    """Append-only log of department incentive changes."""

    __tablename__ = "department_incentive_history"

    history_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    department_id: Mapped[UUID] = mapped_column(
        ForeignKey("department.department_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    incentive_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Relationships
    department: Mapped[Department] = relationship(back_populates="incentive_history")
