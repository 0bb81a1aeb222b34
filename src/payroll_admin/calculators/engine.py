"""Monthly gross-pay calculation engine."""

from __future__ import annotations

import calendar
import hashlib
import json
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.calculators.incentive_lookup import DepartmentIncentiveLookup
from payroll_admin.calculators.matchers import (
    AbsenceThresholdMatcher,
    ServiceBracketMatcher,
    match_absence_threshold,
    match_service_bracket,
    years_of_service,
)
from payroll_admin.calculators.providers import AbsenceRecordProvider, EmployeeProvider
from payroll_admin.calculators.salary_resolver import SalaryResolver
from payroll_admin.calculators.types import RateRule, RateTables, SnapshotCalculation
from payroll_admin.config import get_settings
from payroll_admin.exceptions import ValidationFailure
from payroll_admin.models import Employee

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def validate_period(year: int, month: int) -> None:
    errors = []
    if not 1 <= month <= 12:
        errors.append(f"month must be between 1 and 12, got {month}")
    if not 1 <= year <= 9999:
        errors.append(f"year must be between 1 and 9999, got {year}")
    if errors:
        raise ValidationFailure("Invalid payroll period", errors)


def last_day_of_month(year: int, month: int) -> date:
    """Reference date for salary and years-of-service lookups."""
    return date(year, month, calendar.monthrange(year, month)[1])


def percentage_of(base: Decimal, percentage: Decimal | None) -> Decimal:
    """``base * percentage / 100`` rounded to cents; None counts as zero."""
    if percentage is None:
        return ZERO
    return (base * percentage / Decimal("100")).quantize(CENTS, rounding=ROUND_HALF_UP)


class PayrollCalculator:
    """Computes one employee's gross pay for a month.

    Calculation pipeline (stable order per employee):
    1) Load the employee (non-deleted) with department and job grade
    2) Resolve base salary as of the last day of the month
    3) Compute whole years of service up to that same day
    4) Service-years incentive from the matching active bracket
    5) Department incentive from the department's current percentage
    6) Attendance adjustment from the month's absence record, if any
    7) Gross = base + the three amounts (never clamped)

    Persistence is left to the payroll service.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.employees = EmployeeProvider(session)
        self.salary_resolver = SalaryResolver(session)
        self.bracket_matcher = ServiceBracketMatcher(session)
        self.threshold_matcher = AbsenceThresholdMatcher(session)
        self.incentive_lookup = DepartmentIncentiveLookup(session)
        self.absence_records = AbsenceRecordProvider(session)
        self.settings = get_settings()

    async def load_rate_tables(self) -> RateTables:
        """Read brackets, thresholds and department incentives once."""
        return RateTables(
            brackets=tuple(
                RateRule.from_bracket(b) for b in await self.bracket_matcher.active_brackets()
            ),
            thresholds=tuple(
                RateRule.from_threshold(t)
                for t in await self.threshold_matcher.active_thresholds()
            ),
            department_incentives=await self.incentive_lookup.current_incentives(),
        )

    async def calculate(
        self,
        employee_id: UUID,
        year: int,
        month: int,
        tables: RateTables | None = None,
    ) -> SnapshotCalculation:
        """Calculate gross pay for one employee.

        Raises:
            ValidationFailure: If the period is invalid
            NotFoundError: If the employee is missing or soft-deleted
            SalaryNotFoundError: If no salary is effective by month end
        """
        validate_period(year, month)
        employee = await self.employees.require(employee_id)
        if tables is None:
            tables = await self.load_rate_tables()
        return await self.calculate_for_employee(employee, year, month, tables)

    async def calculate_for_employee(
        self,
        employee: Employee,
        year: int,
        month: int,
        tables: RateTables,
    ) -> SnapshotCalculation:
        as_of_date = last_day_of_month(year, month)

        salary = await self.salary_resolver.get_current_salary(
            employee.employee_id, as_of_date
        )
        base = salary.base_salary

        years = years_of_service(employee.hire_date, as_of_date)
        bracket = match_service_bracket(tables.brackets, years)
        service_pct = bracket.percentage if bracket else None

        department_pct = await self._department_incentive(employee.department_id, tables)

        absence_days: int | None = None
        attendance_pct: Decimal | None = None
        threshold_name: str | None = None
        absence = await self.absence_records.get(employee.employee_id, year, month)
        if absence is not None:
            absence_days = absence.absence_days
            threshold = match_absence_threshold(tables.thresholds, absence_days)
            if threshold is not None:
                attendance_pct = threshold.percentage
                threshold_name = threshold.name

        department_amount = percentage_of(base, department_pct)
        service_amount = percentage_of(base, service_pct)
        attendance_amount = percentage_of(base, attendance_pct)

        return SnapshotCalculation(
            employee_id=employee.employee_id,
            year=year,
            month=month,
            as_of_date=as_of_date,
            base_salary=base,
            years_of_service=years,
            department_incentive_percentage=department_pct,
            department_incentive_amount=department_amount,
            service_years_incentive_percentage=service_pct,
            service_years_incentive_amount=service_amount,
            attendance_adjustment_percentage=attendance_pct,
            attendance_adjustment_amount=attendance_amount,
            absence_days=absence_days,
            gross_salary=base + department_amount + service_amount + attendance_amount,
            service_bracket_name=bracket.name if bracket else None,
            absence_threshold_name=threshold_name,
        )

    async def _department_incentive(
        self, department_id: UUID, tables: RateTables
    ) -> Decimal | None:
        if department_id in tables.department_incentives:
            return tables.department_incentives[department_id]
        # Department created after the tables were read
        return await self.incentive_lookup.get_current_incentive(department_id)

    def inputs_fingerprint(self, calculation: SnapshotCalculation) -> str:
        """Hash of the inputs and engine version behind a calculation."""
        payload = calculation.to_canonical_dict()
        payload["engine_version"] = self.settings.engine_version
        canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()
