"""Tests for payroll reports."""

from datetime import date
from decimal import Decimal

import pytest

from payroll_admin.services import AbsenceService, PayrollService, ReportingService
from payroll_admin.services.period_lock import PeriodLockRegistry

THIS_YEAR = date.today().year


class TestAttendanceReport:
    @pytest.mark.asyncio
    async def test_rows_with_adjustment(
        self, session, make_employee, other_department, absence_thresholds
    ):
        absent = await make_employee(last_name="Zed")
        present = await make_employee(last_name="Adams")
        await make_employee(base_salary=None)
        sales = await make_employee(department_id=other_department.department_id)
        await AbsenceService(session).record_absence(absent.employee_id, THIS_YEAR, 1, 4)

        rows = await ReportingService(session).attendance_report(THIS_YEAR, 1)

        assert [r.employee_id for r in rows] == [
            present.employee_id,
            absent.employee_id,
            sales.employee_id,
        ]
        assert rows[0].absence_days == 0
        assert rows[0].adjustment_amount == Decimal("0.00")
        assert rows[1].absence_days == 4
        assert rows[1].adjustment_percentage == Decimal("-5.00")
        assert rows[1].adjustment_amount == Decimal("-500.00")

    @pytest.mark.asyncio
    async def test_department_filter(self, session, make_employee, other_department):
        await make_employee()
        sales = await make_employee(department_id=other_department.department_id)

        rows = await ReportingService(session).attendance_report(
            THIS_YEAR, 1, department_id=other_department.department_id
        )

        assert [r.employee_id for r in rows] == [sales.employee_id]


class TestIncentiveReport:
    @pytest.mark.asyncio
    async def test_snapshot_and_computed_rows(
        self, session, make_employee, record_absence, service_brackets, absence_thresholds
    ):
        stored = await make_employee(last_name="Alpha")
        computed = await make_employee(last_name="Beta")
        await make_employee(last_name="Gamma", base_salary=None)
        await record_absence(computed, 2025, 6, 4)
        payroll = PayrollService(session, lock_registry=PeriodLockRegistry())
        await payroll.calculate_gross_pay(stored.employee_id, 2025, 6)

        rows = await ReportingService(session).incentive_report(2025, 6)

        assert [r.employee_id for r in rows] == [stored.employee_id, computed.employee_id]
        assert rows[0].from_snapshot is True
        assert rows[0].total_incentives == Decimal("1500.00")
        assert rows[0].total_deductions == Decimal("0.00")
        assert rows[1].from_snapshot is False
        assert rows[1].attendance_adjustment_amount == Decimal("-500.00")
        assert rows[1].total_incentives == Decimal("1500.00")
        assert rows[1].total_deductions == Decimal("500.00")
        assert rows[1].gross_salary == Decimal("11000.00")


class TestSalaryReport:
    @pytest.mark.asyncio
    async def test_summaries(self, session, make_employee, other_department):
        first = await make_employee()
        await make_employee(base_salary=Decimal("8000.00"))
        await make_employee(
            department_id=other_department.department_id, base_salary=Decimal("6000.00")
        )
        payroll = PayrollService(session, lock_registry=PeriodLockRegistry())
        await payroll.calculate_gross_pay(first.employee_id, 2025, 6)

        report = await ReportingService(session).salary_report(2025, 6)

        assert report.summary.employee_count == 3
        assert report.summary.total_base_salary == Decimal("24000.00")
        assert report.summary.total_gross_salary == Decimal("24500.00")
        assert report.summary.average_gross_salary == Decimal("8166.67")
        engineering = report.department_summaries["Engineering"]
        assert engineering.employee_count == 2
        assert engineering.total_gross_salary == Decimal("18500.00")
        assert report.department_summaries["Sales"].total_gross_salary == Decimal("6000.00")
        assert [r.has_payroll_record for r in report.rows] == [True, False, False]

    @pytest.mark.asyncio
    async def test_empty(self, session):
        report = await ReportingService(session).salary_report(2025, 6)

        assert report.rows == []
        assert report.summary.average_gross_salary == Decimal("0.00")


class TestEmployeeDirectory:
    @pytest.mark.asyncio
    async def test_years_of_service(self, session, make_employee):
        employee = await make_employee(hire_date=date(2020, 6, 1))

        (row,) = await ReportingService(session).employee_directory(as_of=date(2025, 5, 31))

        assert row.employee_id == employee.employee_id
        assert row.years_of_service == 4
        assert row.department_name == "Engineering"
        assert row.job_grade_name == "G5"
