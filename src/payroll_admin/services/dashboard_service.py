"""Headline figures for the administration dashboard.

Payroll totals come from persisted snapshots only. A month that has not
been generated yet reports zero rather than triggering a calculation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.calculators.engine import CENTS, ZERO, validate_period
from payroll_admin.models import Department, Employee, EmploymentStatus, PayrollSnapshot


def previous_period(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


@dataclass(frozen=True)
class PayrollSummary:
    year: int
    month: int
    employees_with_payroll: int
    total_gross: Decimal
    average_gross: Decimal


@dataclass(frozen=True)
class DashboardStatistics:
    as_of: date
    total_employees: int
    active_employees: int
    total_departments: int
    current_payroll: PayrollSummary
    previous_payroll: PayrollSummary
    # None when the previous month has no payroll to compare against
    payroll_change_percentage: Decimal | None


class DashboardService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def payroll_summary(self, year: int, month: int) -> PayrollSummary:
        """Total and average gross over the period's snapshots."""
        validate_period(year, month)
        result = await self.session.execute(
            select(PayrollSnapshot.gross_salary)
            .join(Employee, Employee.employee_id == PayrollSnapshot.employee_id)
            .where(
                PayrollSnapshot.year == year,
                PayrollSnapshot.month == month,
                Employee.is_deleted.is_(False),
            )
        )
        grosses = list(result.scalars())
        total = sum(grosses, ZERO)
        average = (
            (total / len(grosses)).quantize(CENTS, rounding=ROUND_HALF_UP) if grosses else ZERO
        )
        return PayrollSummary(
            year=year,
            month=month,
            employees_with_payroll=len(grosses),
            total_gross=total,
            average_gross=average,
        )

    async def statistics(self, as_of: date | None = None) -> DashboardStatistics:
        """Headcounts plus this month's payroll against the previous month's."""
        as_of = as_of or date.today()
        current = await self.payroll_summary(as_of.year, as_of.month)
        previous = await self.payroll_summary(*previous_period(as_of.year, as_of.month))

        change = None
        if previous.total_gross != 0:
            change = (
                (current.total_gross - previous.total_gross) / previous.total_gross * 100
            ).quantize(CENTS, rounding=ROUND_HALF_UP)

        return DashboardStatistics(
            as_of=as_of,
            total_employees=await self._count_employees(),
            active_employees=await self._count_employees(EmploymentStatus.ACTIVE),
            total_departments=await self.session.scalar(
                select(func.count()).select_from(Department)
            )
            or 0,
            current_payroll=current,
            previous_payroll=previous,
            payroll_change_percentage=change,
        )

    async def _count_employees(self, status: EmploymentStatus | None = None) -> int:
        query = (
            select(func.count())
            .select_from(Employee)
            .where(Employee.is_deleted.is_(False))
        )
        if status is not None:
            query = query.where(Employee.employment_status == status.value)
        return await self.session.scalar(query) or 0
