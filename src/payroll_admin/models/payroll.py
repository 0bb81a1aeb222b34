"""Payroll snapshot model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_admin.models.base import Base, TimestampMixin, utc_now

if TYPE_CHECKING:
    from payroll_admin.models.employee import Employee


class PayrollSnapshot(Base, TimestampMixin):
    """Computed payroll for one employee and month.

    Written only by the payroll service. Regeneration overwrites the row for
    the same (employee, year, month) instead of adding another.
    """

    __tablename__ = "payroll_snapshot"

    payroll_snapshot_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="RESTRICT"),
        nullable=False,
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)

    base_salary: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    department_incentive_percentage: Mapped[Decimal | None] = mapped_column(
        Numeric(5, 2), nullable=True
    )
    department_incentive_amount: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False
    )
    service_years_incentive_percentage: Mapped[Decimal | None] = mapped_column(
        Numeric(5, 2), nullable=True
    )
    service_years_incentive_amount: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False
    )
    attendance_adjustment_percentage: Mapped[Decimal | None] = mapped_column(
        Numeric(5, 2), nullable=True
    )
    attendance_adjustment_amount: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False
    )
    gross_salary: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    absence_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    years_of_service: Mapped[int] = mapped_column(Integer, nullable=False)

    calculation_version: Mapped[str] = mapped_column(String(20), nullable=False)
    inputs_fingerprint: Mapped[str] = mapped_column(String(64), nullable=False)
    calculated_at: Mapped[datetime] = mapped_column(nullable=False, default=utc_now)

    __table_args__ = (
        UniqueConstraint(
            "employee_id", "year", "month", name="payroll_snapshot_employee_period_unique"
        ),
        CheckConstraint("month BETWEEN 1 AND 12", name="payroll_snapshot_month_check"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship()
