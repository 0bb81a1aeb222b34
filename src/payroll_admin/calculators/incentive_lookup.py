"""Department incentive lookup."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.exceptions import NotFoundError
from payroll_admin.models import Department


class DepartmentIncentiveLookup:
    """Reads the current incentive percentage of departments.

    A null percentage means the department pays no incentive.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_current_incentive(self, department_id: UUID) -> Decimal | None:
        result = await self.session.execute(
            select(Department.incentive_percentage).where(
                Department.department_id == department_id
            )
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError("Department", department_id)
        return row[0]

    async def current_incentives(self) -> dict[UUID, Decimal | None]:
        """Current percentage for every department, keyed by id."""
        result = await self.session.execute(
            select(Department.department_id, Department.incentive_percentage)
        )
        return {department_id: pct for department_id, pct in result.all()}
