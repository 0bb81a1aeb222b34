"""Tests for employee, salary, absence and incentive administration."""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_admin.exceptions import (
    BusinessRuleViolationError,
    NotFoundError,
    ValidationFailure,
)
from payroll_admin.models import EmploymentStatus, IncentiveType
from payroll_admin.services import (
    AbsenceService,
    EmployeeService,
    IncentiveService,
    SalaryService,
)

THIS_YEAR = date.today().year


class TestEmployeeService:
    """Test employee creation and soft delete."""

    async def _create(self, session, department, job_grade, **overrides):
        fields = dict(
            employee_number="A-100",
            first_name="Ada",
            last_name="Lovelace",
            email="Ada@Example.com",
            hire_date=date(2019, 3, 1),
            department_id=department.department_id,
            job_grade_id=job_grade.job_grade_id,
            date_of_birth=date(1990, 12, 10),
        )
        fields.update(overrides)
        return await EmployeeService(session).create_employee(**fields)

    @pytest.mark.asyncio
    async def test_create_employee(self, session, department, job_grade):
        employee = await self._create(session, department, job_grade)

        assert employee.email == "ada@example.com"
        assert employee.department.name == "Engineering"
        assert employee.employment_status == EmploymentStatus.ACTIVE.value

    @pytest.mark.asyncio
    async def test_duplicate_number(self, session, department, job_grade):
        await self._create(session, department, job_grade)

        with pytest.raises(BusinessRuleViolationError):
            await self._create(session, department, job_grade, email="other@example.com")

    @pytest.mark.asyncio
    async def test_too_young_at_hire(self, session, department, job_grade):
        with pytest.raises(ValidationFailure) as exc_info:
            await self._create(session, department, job_grade, date_of_birth=date(2005, 3, 2))

        assert any("18" in error for error in exc_info.value.errors)

    @pytest.mark.asyncio
    async def test_future_hire_date(self, session, department, job_grade):
        with pytest.raises(ValidationFailure):
            await self._create(
                session, department, job_grade, hire_date=date.today() + timedelta(days=1)
            )

    @pytest.mark.asyncio
    async def test_unknown_department(self, session, department, job_grade):
        with pytest.raises(NotFoundError):
            await self._create(session, department, job_grade, department_id=uuid4())

    @pytest.mark.asyncio
    async def test_soft_delete_and_restore(self, session, make_employee):
        employee = await make_employee()
        service = EmployeeService(session)

        await service.delete_employee(employee.employee_id)

        with pytest.raises(NotFoundError):
            await service.get_employee(employee.employee_id)
        assert await service.list_employees() == []

        restored = await service.restore_employee(employee.employee_id)
        assert restored.is_deleted is False

    @pytest.mark.asyncio
    async def test_list_by_status(self, session, make_employee):
        await make_employee()
        leaver = await make_employee(status=EmploymentStatus.TERMINATED)

        terminated = await EmployeeService(session).list_employees(
            status=EmploymentStatus.TERMINATED
        )

        assert [e.employee_id for e in terminated] == [leaver.employee_id]

    async def _update(self, session, employee, **overrides):
        fields = dict(
            first_name=employee.first_name,
            last_name=employee.last_name,
            email=employee.email,
            department_id=employee.department_id,
            job_grade_id=employee.job_grade_id,
            employment_status=EmploymentStatus.ACTIVE,
        )
        fields.update(overrides)
        return await EmployeeService(session).update_employee(employee.employee_id, **fields)

    @pytest.mark.asyncio
    async def test_update_employee(self, session, make_employee, other_department):
        employee = await make_employee()

        updated = await self._update(
            session,
            employee,
            first_name="Grace",
            email="Grace@Example.com",
            department_id=other_department.department_id,
            employment_status=EmploymentStatus.INACTIVE,
            phone="555-0100",
        )

        assert updated.first_name == "Grace"
        assert updated.email == "grace@example.com"
        assert updated.department.name == "Sales"
        assert updated.employment_status == EmploymentStatus.INACTIVE.value
        assert updated.employee_number == employee.employee_number

    @pytest.mark.asyncio
    async def test_update_keeps_own_email(self, session, make_employee):
        employee = await make_employee()

        updated = await self._update(session, employee, last_name="Renamed")

        assert updated.last_name == "Renamed"

    @pytest.mark.asyncio
    async def test_update_email_taken(self, session, make_employee):
        employee = await make_employee()
        other = await make_employee()

        with pytest.raises(BusinessRuleViolationError):
            await self._update(session, employee, email=other.email)

    @pytest.mark.asyncio
    async def test_update_too_young_at_hire(self, session, make_employee):
        employee = await make_employee(hire_date=date(2020, 6, 1))

        with pytest.raises(ValidationFailure):
            await self._update(session, employee, date_of_birth=date(2005, 1, 1))

    @pytest.mark.asyncio
    async def test_update_unknown_job_grade(self, session, make_employee):
        employee = await make_employee()

        with pytest.raises(NotFoundError):
            await self._update(session, employee, job_grade_id=uuid4())


class TestSalaryService:
    """Test salary history rules."""

    @pytest.mark.asyncio
    async def test_add_record(self, session, make_employee):
        employee = await make_employee()
        service = SalaryService(session)

        await service.add_salary_record(
            employee.employee_id, Decimal("11000.00"), date(2024, 1, 1), notes="Annual review"
        )
        current = await service.get_current_salary(employee.employee_id, date(2024, 6, 30))

        assert current.base_salary == Decimal("11000.00")
        assert len(await service.get_salary_history(employee.employee_id)) == 2

    @pytest.mark.asyncio
    async def test_duplicate_effective_date(self, session, make_employee):
        employee = await make_employee(salary_effective=date(2020, 6, 1))

        with pytest.raises(BusinessRuleViolationError):
            await SalaryService(session).add_salary_record(
                employee.employee_id, Decimal("12000.00"), date(2020, 6, 1)
            )

    @pytest.mark.asyncio
    async def test_outside_job_grade_band(self, session, make_employee):
        employee = await make_employee()

        with pytest.raises(BusinessRuleViolationError) as exc_info:
            await SalaryService(session).add_salary_record(
                employee.employee_id, Decimal("60000.00"), date(2024, 1, 1)
            )

        assert exc_info.value.rule == "SalaryWithinJobGrade"

    @pytest.mark.asyncio
    async def test_non_positive_salary(self, session, make_employee):
        employee = await make_employee()

        with pytest.raises(ValidationFailure):
            await SalaryService(session).add_salary_record(
                employee.employee_id, Decimal("0.00"), date(2024, 1, 1)
            )

    @pytest.mark.asyncio
    async def test_cannot_delete_only_record(self, session, make_employee):
        employee = await make_employee()
        service = SalaryService(session)
        (only,) = await service.get_salary_history(employee.employee_id)

        with pytest.raises(BusinessRuleViolationError):
            await service.delete_salary_record(employee.employee_id, only.salary_record_id)

    @pytest.mark.asyncio
    async def test_delete_record(self, session, make_employee):
        employee = await make_employee()
        service = SalaryService(session)
        extra = await service.add_salary_record(
            employee.employee_id, Decimal("11000.00"), date(2024, 1, 1)
        )

        await service.delete_salary_record(employee.employee_id, extra.salary_record_id)

        assert len(await service.get_salary_history(employee.employee_id)) == 1

    @pytest.mark.asyncio
    async def test_update_record(self, session, make_employee):
        employee = await make_employee()
        service = SalaryService(session)
        extra = await service.add_salary_record(
            employee.employee_id, Decimal("11000.00"), date(2024, 1, 1)
        )

        await service.update_salary_record(
            employee.employee_id,
            extra.salary_record_id,
            Decimal("12000.00"),
            date(2024, 2, 1),
            notes="Corrected",
        )
        current = await service.get_current_salary(employee.employee_id, date(2024, 6, 30))

        assert current.salary_record_id == extra.salary_record_id
        assert current.base_salary == Decimal("12000.00")
        assert current.effective_date == date(2024, 2, 1)

    @pytest.mark.asyncio
    async def test_update_keeps_own_effective_date(self, session, make_employee):
        employee = await make_employee(salary_effective=date(2020, 6, 1))
        service = SalaryService(session)
        (only,) = await service.get_salary_history(employee.employee_id)

        updated = await service.update_salary_record(
            employee.employee_id, only.salary_record_id, Decimal("10500.00"), date(2020, 6, 1)
        )

        assert updated.base_salary == Decimal("10500.00")

    @pytest.mark.asyncio
    async def test_update_onto_taken_date(self, session, make_employee):
        employee = await make_employee(salary_effective=date(2020, 6, 1))
        service = SalaryService(session)
        extra = await service.add_salary_record(
            employee.employee_id, Decimal("11000.00"), date(2024, 1, 1)
        )

        with pytest.raises(BusinessRuleViolationError) as exc_info:
            await service.update_salary_record(
                employee.employee_id, extra.salary_record_id, Decimal("11000.00"),
                date(2020, 6, 1),
            )

        assert exc_info.value.rule == "UniqueSalaryEffectiveDate"

    @pytest.mark.asyncio
    async def test_update_outside_job_grade_band(self, session, make_employee):
        employee = await make_employee()
        service = SalaryService(session)
        (only,) = await service.get_salary_history(employee.employee_id)

        with pytest.raises(BusinessRuleViolationError) as exc_info:
            await service.update_salary_record(
                employee.employee_id, only.salary_record_id, Decimal("500.00"),
                only.effective_date,
            )

        assert exc_info.value.rule == "SalaryWithinJobGrade"

    @pytest.mark.asyncio
    async def test_update_other_employees_record(self, session, make_employee):
        owner = await make_employee()
        other = await make_employee()
        (record,) = await SalaryService(session).get_salary_history(owner.employee_id)

        with pytest.raises(NotFoundError):
            await SalaryService(session).update_salary_record(
                other.employee_id, record.salary_record_id, Decimal("10000.00"),
                record.effective_date,
            )


class TestAbsenceService:
    """Test monthly absence records."""

    @pytest.mark.asyncio
    async def test_record_stores_matching_percentage(
        self, session, make_employee, absence_thresholds
    ):
        employee = await make_employee()

        record = await AbsenceService(session).record_absence(
            employee.employee_id, THIS_YEAR, 1, 4, reason="Flu"
        )

        assert record.adjustment_percentage == Decimal("-5.00")

    @pytest.mark.asyncio
    async def test_one_record_per_month(self, session, make_employee):
        employee = await make_employee()
        service = AbsenceService(session)
        await service.record_absence(employee.employee_id, THIS_YEAR, 1, 2)

        with pytest.raises(BusinessRuleViolationError):
            await service.record_absence(employee.employee_id, THIS_YEAR, 1, 3)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "year,month,days",
        [
            (THIS_YEAR, 1, 32),
            (THIS_YEAR, 1, -1),
            (THIS_YEAR, 0, 1),
            (THIS_YEAR - 6, 1, 1),
            (THIS_YEAR + 2, 1, 1),
        ],
    )
    async def test_invalid_fields(self, session, make_employee, year, month, days):
        employee = await make_employee()

        with pytest.raises(ValidationFailure):
            await AbsenceService(session).record_absence(employee.employee_id, year, month, days)

    @pytest.mark.asyncio
    async def test_update_rematches_threshold(
        self, session, make_employee, absence_thresholds
    ):
        employee = await make_employee()
        service = AbsenceService(session)
        record = await service.record_absence(employee.employee_id, THIS_YEAR, 2, 1)

        updated = await service.update_absence(record.absence_record_id, 7)

        assert updated.absence_days == 7
        assert updated.adjustment_percentage == Decimal("-10.00")

    @pytest.mark.asyncio
    async def test_update_checks_owner(self, session, make_employee):
        owner = await make_employee()
        other = await make_employee()
        service = AbsenceService(session)
        record = await service.record_absence(owner.employee_id, THIS_YEAR, 2, 1)

        with pytest.raises(NotFoundError):
            await service.update_absence(
                record.absence_record_id, 2, employee_id=other.employee_id
            )

    @pytest.mark.asyncio
    async def test_update_record_older_than_year_window(
        self, session, make_employee, record_absence, absence_thresholds
    ):
        employee = await make_employee()
        record = await record_absence(employee, THIS_YEAR - 7, 3, 1)

        updated = await AbsenceService(session).update_absence(record.absence_record_id, 4)

        assert updated.year == THIS_YEAR - 7
        assert updated.absence_days == 4
        assert updated.adjustment_percentage == Decimal("-5.00")

    @pytest.mark.asyncio
    async def test_delete_record(self, session, make_employee):
        employee = await make_employee()
        service = AbsenceService(session)
        record = await service.record_absence(employee.employee_id, THIS_YEAR, 3, 2)

        await service.delete_absence(record.absence_record_id, employee.employee_id)

        assert await service.list_absences(employee.employee_id) == []
        # The month is free again
        await service.record_absence(employee.employee_id, THIS_YEAR, 3, 1)

    @pytest.mark.asyncio
    async def test_delete_checks_owner(self, session, make_employee):
        owner = await make_employee()
        other = await make_employee()
        service = AbsenceService(session)
        record = await service.record_absence(owner.employee_id, THIS_YEAR, 3, 2)

        with pytest.raises(NotFoundError):
            await service.delete_absence(record.absence_record_id, other.employee_id)

        assert len(await service.list_absences(owner.employee_id)) == 1


class TestIncentiveService:
    @pytest.mark.asyncio
    async def test_grant_and_list_in_range(self, session, make_employee):
        employee = await make_employee()
        service = IncentiveService(session)
        await service.grant_incentive(
            employee.employee_id, "Launch bonus", Decimal("750.00"), date(2024, 3, 1),
            IncentiveType.BONUS,
        )
        await service.grant_incentive(
            employee.employee_id, "Referral", Decimal("200.00"), date(2024, 9, 1),
            IncentiveType.OTHER,
        )

        in_range = await service.list_incentives(
            employee.employee_id, date(2024, 1, 1), date(2024, 6, 30)
        )

        assert [i.title for i in in_range] == ["Launch bonus"]

    @pytest.mark.asyncio
    async def test_inverted_range(self, session, make_employee):
        employee = await make_employee()

        with pytest.raises(ValidationFailure):
            await IncentiveService(session).list_incentives(
                employee.employee_id, date(2024, 6, 30), date(2024, 1, 1)
            )

    @pytest.mark.asyncio
    async def test_non_positive_amount(self, session, make_employee):
        employee = await make_employee()

        with pytest.raises(ValidationFailure):
            await IncentiveService(session).grant_incentive(
                employee.employee_id, "Nothing", Decimal("0"), date(2024, 1, 1),
                IncentiveType.BONUS,
            )

    @pytest.mark.asyncio
    async def test_update_incentive(self, session, make_employee):
        employee = await make_employee()
        service = IncentiveService(session)
        incentive = await service.grant_incentive(
            employee.employee_id, "Launch bonus", Decimal("750.00"), date(2024, 3, 1),
            IncentiveType.BONUS,
        )

        updated = await service.update_incentive(
            incentive.incentive_id,
            " Launch bonus (revised) ",
            Decimal("900.00"),
            date(2024, 3, 15),
            IncentiveType.COMMISSION,
            is_taxable=False,
            employee_id=employee.employee_id,
        )

        assert updated.title == "Launch bonus (revised)"
        assert updated.amount == Decimal("900.00")
        assert updated.incentive_type == IncentiveType.COMMISSION.value
        assert updated.is_taxable is False
        assert updated.employee_id == employee.employee_id

    @pytest.mark.asyncio
    async def test_update_rejects_future_date(self, session, make_employee):
        employee = await make_employee()
        service = IncentiveService(session)
        incentive = await service.grant_incentive(
            employee.employee_id, "Bonus", Decimal("100.00"), date(2024, 3, 1),
            IncentiveType.BONUS,
        )

        with pytest.raises(ValidationFailure):
            await service.update_incentive(
                incentive.incentive_id, "Bonus", Decimal("100.00"),
                date.today() + timedelta(days=1), IncentiveType.BONUS,
            )

    @pytest.mark.asyncio
    async def test_delete_incentive(self, session, make_employee):
        employee = await make_employee()
        service = IncentiveService(session)
        incentive = await service.grant_incentive(
            employee.employee_id, "Bonus", Decimal("100.00"), date(2024, 3, 1),
            IncentiveType.BONUS,
        )

        await service.delete_incentive(incentive.incentive_id, employee.employee_id)

        assert await service.list_incentives(employee.employee_id) == []
        with pytest.raises(NotFoundError):
            await service.get_incentive(incentive.incentive_id)

    @pytest.mark.asyncio
    async def test_delete_checks_owner(self, session, make_employee):
        owner = await make_employee()
        other = await make_employee()
        service = IncentiveService(session)
        incentive = await service.grant_incentive(
            owner.employee_id, "Bonus", Decimal("100.00"), date(2024, 3, 1),
            IncentiveType.BONUS,
        )

        with pytest.raises(NotFoundError):
            await service.delete_incentive(incentive.incentive_id, other.employee_id)
