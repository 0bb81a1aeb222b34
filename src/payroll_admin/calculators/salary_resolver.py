"""Current salary resolution from an employee's salary history."""

from __future__ import annotations

from datetime import date
from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.exceptions import NotFoundError
from payroll_admin.models import SalaryRecord


class SalaryNotFoundError(NotFoundError):
    """Raised when an employee has no salary effective on a date."""

    def __init__(self, employee_id: UUID, as_of_date: date):
        self.employee_id = employee_id
        self.as_of_date = as_of_date
        super().__init__(
            "SalaryRecord",
            employee_id,
            f"No salary record found for employee {employee_id} "
            f"effective on or before {as_of_date}",
        )

    @property
    def context(self) -> dict[str, str]:
        return {
            "entity": self.entity,
            "employee_id": str(self.employee_id),
            "as_of_date": self.as_of_date.isoformat(),
        }


def _recency_key(record: SalaryRecord) -> tuple:
    return (record.effective_date, record.created_at, record.salary_record_id)


def pick_current_salary(
    records: Iterable[SalaryRecord],
    as_of_date: date,
) -> SalaryRecord | None:
    """Pick the record in effect on ``as_of_date``.

    The latest effective date on or before the as-of date wins. Records with
    the same effective date are ordered by ``created_at`` and then by primary
    key, highest first, so the result does not depend on input order.
    """
    candidates = [r for r in records if r.effective_date <= as_of_date]
    if not candidates:
        return None
    return max(candidates, key=_recency_key)


class SalaryResolver:
    """Resolves the base salary in effect for an employee on a date."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def most_recent_on_or_before(
        self,
        employee_id: UUID,
        as_of_date: date,
    ) -> SalaryRecord | None:
        """Return the latest salary record effective on or before a date."""
        result = await self.session.execute(
            select(SalaryRecord)
            .where(
                SalaryRecord.employee_id == employee_id,
                SalaryRecord.effective_date <= as_of_date,
            )
            .order_by(
                SalaryRecord.effective_date.desc(),
                SalaryRecord.created_at.desc(),
                SalaryRecord.salary_record_id.desc(),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_current_salary(
        self,
        employee_id: UUID,
        as_of_date: date,
    ) -> SalaryRecord:
        """Get the salary record in effect on ``as_of_date``.

        Raises:
            SalaryNotFoundError: If no record is effective on or before the date
        """
        record = await self.most_recent_on_or_before(employee_id, as_of_date)
        if record is None:
            raise SalaryNotFoundError(employee_id, as_of_date)
        return record

    async def get_history(self, employee_id: UUID) -> list[SalaryRecord]:
        """Get the full salary history, newest first."""
        result = await self.session.execute(
            select(SalaryRecord)
            .where(SalaryRecord.employee_id == employee_id)
            .order_by(
                SalaryRecord.effective_date.desc(),
                SalaryRecord.created_at.desc(),
            )
        )
        return list(result.scalars().all())
