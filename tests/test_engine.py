"""Tests for the monthly gross-pay calculation engine."""

import dataclasses
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_admin.calculators.engine import (
    PayrollCalculator,
    last_day_of_month,
    percentage_of,
    validate_period,
)
from payroll_admin.calculators.salary_resolver import SalaryNotFoundError
from payroll_admin.calculators.types import RateRule
from payroll_admin.exceptions import NotFoundError, ValidationFailure
from payroll_admin.models import AbsenceThreshold, SalaryRecord


class TestHelpers:
    def test_percentage_of_rounds_half_up_to_cents(self):
        assert percentage_of(Decimal("1234.50"), Decimal("10.00")) == Decimal("123.45")
        assert percentage_of(Decimal("100.05"), Decimal("5.00")) == Decimal("5.00")
        assert percentage_of(Decimal("100.10"), Decimal("2.50")) == Decimal("2.50")
        assert percentage_of(Decimal("100.30"), Decimal("2.50")) == Decimal("2.51")

    def test_percentage_of_missing_rate_is_zero(self):
        assert percentage_of(Decimal("5000.00"), None) == Decimal("0.00")

    def test_last_day_of_month(self):
        assert last_day_of_month(2024, 2) == date(2024, 2, 29)
        assert last_day_of_month(2025, 2) == date(2025, 2, 28)
        assert last_day_of_month(2025, 12) == date(2025, 12, 31)

    @pytest.mark.parametrize("year,month", [(2025, 0), (2025, 13), (0, 6)])
    def test_validate_period_rejects(self, year, month):
        with pytest.raises(ValidationFailure):
            validate_period(year, month)


class TestRateRule:
    """Rate rules are value copies of the configured rows."""

    @pytest.mark.asyncio
    async def test_copies_bracket(self, service_brackets):
        rule = RateRule.from_bracket(service_brackets[2])

        assert rule.rule_id == service_brackets[2].service_bracket_id
        assert rule.range_min == 7
        assert rule.range_max is None
        assert rule.percentage == Decimal("15.00")

    @pytest.mark.asyncio
    async def test_is_immutable(self, absence_thresholds):
        rule = RateRule.from_threshold(absence_thresholds[0])

        with pytest.raises(dataclasses.FrozenInstanceError):
            rule.percentage = Decimal("99.00")

        absence_thresholds[0].adjustment_percentage = Decimal("50.00")
        assert rule.percentage == Decimal("2.00")


class TestPayrollCalculator:
    """End-to-end calculation against the database."""

    @pytest.mark.asyncio
    async def test_full_calculation(
        self, session, make_employee, record_absence, service_brackets, absence_thresholds
    ):
        """10000 base, 5% department, 10% for 5 years, +2% for 1 absence day."""
        employee = await make_employee(hire_date=date(2020, 6, 1))
        await record_absence(employee, 2025, 6, 1)

        result = await PayrollCalculator(session).calculate(employee.employee_id, 2025, 6)

        assert result.base_salary == Decimal("10000.00")
        assert result.years_of_service == 5
        assert result.department_incentive_amount == Decimal("500.00")
        assert result.service_years_incentive_amount == Decimal("1000.00")
        assert result.attendance_adjustment_amount == Decimal("200.00")
        assert result.gross_salary == Decimal("11700.00")
        assert result.absence_days == 1
        assert result.service_bracket_name == "3-6 years"
        assert result.absence_threshold_name == "0-2 days"

    @pytest.mark.asyncio
    async def test_no_absence_record_means_no_adjustment(
        self, session, make_employee, service_brackets, absence_thresholds
    ):
        employee = await make_employee(hire_date=date(2020, 6, 1))

        result = await PayrollCalculator(session).calculate(employee.employee_id, 2025, 6)

        assert result.absence_days is None
        assert result.attendance_adjustment_percentage is None
        assert result.attendance_adjustment_amount == Decimal("0.00")
        assert result.gross_salary == Decimal("11500.00")

    @pytest.mark.asyncio
    async def test_deduction_is_not_clamped(
        self, session, make_employee, record_absence, absence_thresholds
    ):
        """A deduction larger than the incentives pulls gross below base."""
        employee = await make_employee(hire_date=date(2020, 6, 1))
        await record_absence(employee, 2025, 6, 12)
        absence_thresholds[2].max_absence_days = 20
        session.add(
            AbsenceThreshold(
                name="Extreme",
                min_absence_days=21,
                max_absence_days=None,
                adjustment_percentage=Decimal("-150.00"),
            )
        )
        await session.flush()
        calculator = PayrollCalculator(session)

        result = await calculator.calculate(employee.employee_id, 2025, 6)
        assert result.attendance_adjustment_amount == Decimal("-1000.00")
        assert result.gross_salary == Decimal("9500.00")

        await record_absence(employee, 2025, 7, 25)
        result = await calculator.calculate(employee.employee_id, 2025, 7)
        assert result.gross_salary == Decimal("-4500.00")

    @pytest.mark.asyncio
    async def test_years_counted_to_month_end(
        self, session, make_employee, service_brackets
    ):
        """An anniversary on the last day of the month counts for that month."""
        employee = await make_employee(
            hire_date=date(2022, 6, 30), salary_effective=date(2022, 6, 30)
        )
        calculator = PayrollCalculator(session)

        may = await calculator.calculate(employee.employee_id, 2025, 5)
        june = await calculator.calculate(employee.employee_id, 2025, 6)

        assert may.years_of_service == 2
        assert may.service_years_incentive_percentage == Decimal("5.00")
        assert june.years_of_service == 3
        assert june.service_years_incentive_percentage == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_mid_month_raise_applies_to_month(self, session, make_employee):
        employee = await make_employee()
        session.add(
            SalaryRecord(
                employee_id=employee.employee_id,
                base_salary=Decimal("12000.00"),
                effective_date=date(2025, 6, 15),
            )
        )
        await session.flush()

        result = await PayrollCalculator(session).calculate(employee.employee_id, 2025, 6)

        assert result.base_salary == Decimal("12000.00")

    @pytest.mark.asyncio
    async def test_no_matching_bracket(self, session, make_employee):
        employee = await make_employee()

        result = await PayrollCalculator(session).calculate(employee.employee_id, 2025, 6)

        assert result.service_years_incentive_percentage is None
        assert result.service_years_incentive_amount == Decimal("0.00")
        assert result.service_bracket_name is None

    @pytest.mark.asyncio
    async def test_department_without_incentive(
        self, session, make_employee, other_department
    ):
        employee = await make_employee(department_id=other_department.department_id)

        result = await PayrollCalculator(session).calculate(employee.employee_id, 2025, 6)

        assert result.department_incentive_percentage is None
        assert result.department_incentive_amount == Decimal("0.00")
        assert result.gross_salary == Decimal("10000.00")

    @pytest.mark.asyncio
    async def test_missing_employee(self, session):
        with pytest.raises(NotFoundError) as exc_info:
            await PayrollCalculator(session).calculate(uuid4(), 2025, 6)

        assert exc_info.value.entity == "Employee"

    @pytest.mark.asyncio
    async def test_soft_deleted_employee_is_not_found(self, session, make_employee):
        employee = await make_employee()
        employee.is_deleted = True
        await session.flush()

        with pytest.raises(NotFoundError):
            await PayrollCalculator(session).calculate(employee.employee_id, 2025, 6)

    @pytest.mark.asyncio
    async def test_no_salary_by_month_end(self, session, make_employee):
        employee = await make_employee(salary_effective=date(2025, 7, 1))

        with pytest.raises(SalaryNotFoundError):
            await PayrollCalculator(session).calculate(employee.employee_id, 2025, 6)

    @pytest.mark.asyncio
    async def test_rate_tables_are_read_once(
        self, session, make_employee, service_brackets
    ):
        """A bracket change after the tables were read does not affect the call."""
        employee = await make_employee()
        calculator = PayrollCalculator(session)
        tables = await calculator.load_rate_tables()

        service_brackets[1].incentive_percentage = Decimal("20.00")
        service_brackets[1].is_active = False
        await session.flush()

        result = await calculator.calculate(employee.employee_id, 2025, 6, tables=tables)
        fresh = await calculator.calculate(employee.employee_id, 2025, 6)

        assert result.service_bracket_name == "3-6 years"
        assert fresh.service_bracket_name is None


class TestInputsFingerprint:
    """Test the inputs fingerprint stored with each snapshot."""

    @pytest.mark.asyncio
    async def test_deterministic(self, session, make_employee):
        employee = await make_employee()
        calculator = PayrollCalculator(session)

        first = await calculator.calculate(employee.employee_id, 2025, 6)
        second = await calculator.calculate(employee.employee_id, 2025, 6)

        assert calculator.inputs_fingerprint(first) == calculator.inputs_fingerprint(second)
        assert len(calculator.inputs_fingerprint(first)) == 64

    @pytest.mark.asyncio
    async def test_changes_with_engine_version(self, session, make_employee):
        employee = await make_employee()
        calculator = PayrollCalculator(session)
        result = await calculator.calculate(employee.employee_id, 2025, 6)
        before = calculator.inputs_fingerprint(result)

        calculator.settings = dataclasses.replace(calculator.settings, engine_version="2.0.0")

        assert calculator.inputs_fingerprint(result) != before
