"""Pytest fixtures for payroll administration tests."""

from __future__ import annotations

import itertools
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from payroll_admin.models import (
    AbsenceRecord,
    AbsenceThreshold,
    Base,
    Department,
    Employee,
    EmploymentStatus,
    JobGrade,
    SalaryRecord,
    ServiceBracket,
)

# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    """Create a fresh test database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def job_grade(session: AsyncSession) -> JobGrade:
    """Create a job grade wide enough for every test salary."""
    grade = JobGrade(
        name="G5",
        description="Senior engineer",
        min_salary=Decimal("1000.00"),
        max_salary=Decimal("50000.00"),
    )
    session.add(grade)
    await session.flush()
    return grade


@pytest_asyncio.fixture
async def department(session: AsyncSession) -> Department:
    """Create a department paying a 5% incentive."""
    dept = Department(
        name="Engineering",
        incentive_percentage=Decimal("5.00"),
        incentive_set_date=date(2024, 1, 1),
    )
    session.add(dept)
    await session.flush()
    return dept


@pytest_asyncio.fixture
async def other_department(session: AsyncSession) -> Department:
    """Create a department without an incentive."""
    dept = Department(name="Sales")
    session.add(dept)
    await session.flush()
    return dept


@pytest_asyncio.fixture
async def service_brackets(session: AsyncSession) -> list[ServiceBracket]:
    """Brackets 0-2 (5%), 3-6 (10%) and 7+ (15%)."""
    brackets = [
        ServiceBracket(
            name="0-2 years",
            min_years_of_service=0,
            max_years_of_service=2,
            incentive_percentage=Decimal("5.00"),
        ),
        ServiceBracket(
            name="3-6 years",
            min_years_of_service=3,
            max_years_of_service=6,
            incentive_percentage=Decimal("10.00"),
        ),
        ServiceBracket(
            name="7+ years",
            min_years_of_service=7,
            max_years_of_service=None,
            incentive_percentage=Decimal("15.00"),
        ),
    ]
    session.add_all(brackets)
    await session.flush()
    return brackets


@pytest_asyncio.fixture
async def absence_thresholds(session: AsyncSession) -> list[AbsenceThreshold]:
    """Thresholds 0-2 days (+2%), 3-5 days (-5%) and 6+ days (-10%)."""
    thresholds = [
        AbsenceThreshold(
            name="0-2 days",
            min_absence_days=0,
            max_absence_days=2,
            adjustment_percentage=Decimal("2.00"),
        ),
        AbsenceThreshold(
            name="3-5 days",
            min_absence_days=3,
            max_absence_days=5,
            adjustment_percentage=Decimal("-5.00"),
        ),
        AbsenceThreshold(
            name="6+ days",
            min_absence_days=6,
            max_absence_days=None,
            adjustment_percentage=Decimal("-10.00"),
        ),
    ]
    session.add_all(thresholds)
    await session.flush()
    return thresholds


MakeEmployee = Callable[..., Awaitable[Employee]]


@pytest.fixture
def make_employee(
    session: AsyncSession, department: Department, job_grade: JobGrade
) -> MakeEmployee:
    """Factory creating employees with one salary record each.

    Pass ``base_salary=None`` to create an employee without salary history.
    """
    counter = itertools.count(1)

    async def _make(
        hire_date: date = date(2020, 6, 1),
        department_id=None,
        base_salary: Decimal | None = Decimal("10000.00"),
        salary_effective: date = date(2020, 6, 1),
        status: EmploymentStatus = EmploymentStatus.ACTIVE,
        last_name: str | None = None,
    ) -> Employee:
        n = next(counter)
        employee = Employee(
            employee_number=f"E{n:04d}",
            first_name="Test",
            last_name=last_name or f"Employee{n}",
            email=f"employee{n}@example.com",
            hire_date=hire_date,
            department_id=department_id or department.department_id,
            job_grade_id=job_grade.job_grade_id,
            employment_status=status.value,
        )
        session.add(employee)
        await session.flush()

        if base_salary is not None:
            session.add(
                SalaryRecord(
                    employee_id=employee.employee_id,
                    base_salary=base_salary,
                    effective_date=salary_effective,
                )
            )
            await session.flush()
        return employee

    return _make


@pytest.fixture
def record_absence(session: AsyncSession) -> Callable[..., Awaitable[AbsenceRecord]]:
    """Factory adding an absence record directly to the store."""

    async def _record(employee: Employee, year: int, month: int, days: int) -> AbsenceRecord:
        record = AbsenceRecord(
            employee_id=employee.employee_id,
            year=year,
            month=month,
            absence_days=days,
        )
        session.add(record)
        await session.flush()
        return record

    return _record
