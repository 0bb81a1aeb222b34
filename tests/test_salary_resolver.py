"""Tests for current salary resolution."""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from payroll_admin.calculators.salary_resolver import (
    SalaryNotFoundError,
    SalaryResolver,
    pick_current_salary,
)
from payroll_admin.exceptions import NotFoundError
from payroll_admin.models import SalaryRecord


def record(amount, effective, created=None, record_id=None):
    return SalaryRecord(
        salary_record_id=record_id or uuid4(),
        employee_id=uuid4(),
        base_salary=Decimal(amount),
        effective_date=effective,
        created_at=created or datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class TestPickCurrentSalary:
    """Test selection among in-memory salary records."""

    def test_latest_on_or_before_wins(self):
        records = [
            record("9000.00", date(2023, 1, 1)),
            record("10000.00", date(2024, 1, 1)),
            record("12000.00", date(2025, 1, 1)),
        ]

        current = pick_current_salary(records, date(2024, 12, 31))

        assert current.base_salary == Decimal("10000.00")

    def test_effective_date_is_inclusive(self):
        records = [record("9000.00", date(2023, 1, 1)), record("10000.00", date(2024, 1, 1))]

        assert pick_current_salary(records, date(2024, 1, 1)).base_salary == Decimal("10000.00")

    def test_nothing_effective_yet(self):
        assert pick_current_salary([record("9000.00", date(2025, 1, 1))], date(2024, 6, 30)) is None

    def test_same_effective_date_prefers_latest_created(self):
        early = record("9000.00", date(2024, 1, 1), datetime(2024, 1, 1, tzinfo=timezone.utc))
        late = record("9500.00", date(2024, 1, 1), datetime(2024, 2, 1, tzinfo=timezone.utc))

        assert pick_current_salary([late, early], date(2024, 6, 30)) is late
        assert pick_current_salary([early, late], date(2024, 6, 30)) is late

    def test_full_tie_broken_by_primary_key(self):
        low = record("9000.00", date(2024, 1, 1), record_id=UUID(int=1))
        high = record("9500.00", date(2024, 1, 1), record_id=UUID(int=2))

        assert pick_current_salary([high, low], date(2024, 6, 30)) is high
        assert pick_current_salary([low, high], date(2024, 6, 30)) is high


class TestSalaryResolver:
    """Test salary resolution against the database."""

    @pytest.mark.asyncio
    async def test_get_current_salary(self, session, make_employee):
        employee = await make_employee(salary_effective=date(2020, 6, 1))
        session.add(
            SalaryRecord(
                employee_id=employee.employee_id,
                base_salary=Decimal("11000.00"),
                effective_date=date(2025, 6, 15),
            )
        )
        await session.flush()
        resolver = SalaryResolver(session)

        before = await resolver.get_current_salary(employee.employee_id, date(2025, 6, 14))
        after = await resolver.get_current_salary(employee.employee_id, date(2025, 6, 30))

        assert before.base_salary == Decimal("10000.00")
        assert after.base_salary == Decimal("11000.00")

    @pytest.mark.asyncio
    async def test_no_salary_before_first_record(self, session, make_employee):
        employee = await make_employee(salary_effective=date(2024, 1, 1))
        resolver = SalaryResolver(session)

        with pytest.raises(SalaryNotFoundError) as exc_info:
            await resolver.get_current_salary(employee.employee_id, date(2023, 12, 31))

        assert exc_info.value.employee_id == employee.employee_id
        assert exc_info.value.context["as_of_date"] == "2023-12-31"

    @pytest.mark.asyncio
    async def test_missing_salary_is_not_found(self, session):
        """Callers handling NotFoundError also catch a missing salary."""
        resolver = SalaryResolver(session)

        with pytest.raises(NotFoundError):
            await resolver.get_current_salary(uuid4(), date(2025, 1, 31))

    @pytest.mark.asyncio
    async def test_history_newest_first(self, session, make_employee):
        employee = await make_employee(salary_effective=date(2020, 6, 1))
        session.add(
            SalaryRecord(
                employee_id=employee.employee_id,
                base_salary=Decimal("12000.00"),
                effective_date=date(2023, 1, 1),
            )
        )
        await session.flush()

        history = await SalaryResolver(session).get_history(employee.employee_id)

        assert [r.effective_date for r in history] == [date(2023, 1, 1), date(2020, 6, 1)]
