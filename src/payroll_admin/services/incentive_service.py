"""One-off employee incentives."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.calculators.providers import EmployeeProvider
from payroll_admin.exceptions import NotFoundError, ValidationFailure
from payroll_admin.models import Incentive, IncentiveType


def _validate(title: str, amount: Decimal, incentive_date: date) -> None:
    errors: list[str] = []
    if not 1 <= len(title.strip()) <= 100:
        errors.append("Title must be between 1 and 100 characters")
    if amount <= 0:
        errors.append("Amount must be greater than 0")
    if incentive_date > date.today():
        errors.append("Incentive date cannot be in the future")
    if errors:
        raise ValidationFailure("Invalid incentive", errors)


class IncentiveService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.employees = EmployeeProvider(session)

    async def get_incentive(
        self, incentive_id: UUID, employee_id: UUID | None = None
    ) -> Incentive:
        incentive = await self.session.get(Incentive, incentive_id)
        if incentive is None or (
            employee_id is not None and incentive.employee_id != employee_id
        ):
            raise NotFoundError("Incentive", incentive_id)
        return incentive

    async def grant_incentive(
        self,
        employee_id: UUID,
        title: str,
        amount: Decimal,
        incentive_date: date,
        incentive_type: IncentiveType,
        description: str | None = None,
        is_taxable: bool = True,
    ) -> Incentive:
        _validate(title, amount, incentive_date)
        await self.employees.require(employee_id)
        incentive = Incentive(
            employee_id=employee_id,
            title=title.strip(),
            description=description,
            amount=amount,
            incentive_date=incentive_date,
            incentive_type=incentive_type.value,
            is_taxable=is_taxable,
        )
        self.session.add(incentive)
        await self.session.flush()
        return incentive

    async def update_incentive(
        self,
        incentive_id: UUID,
        title: str,
        amount: Decimal,
        incentive_date: date,
        incentive_type: IncentiveType,
        description: str | None = None,
        is_taxable: bool = True,
        employee_id: UUID | None = None,
    ) -> Incentive:
        """Replace every editable field; the owning employee never changes."""
        _validate(title, amount, incentive_date)
        incentive = await self.get_incentive(incentive_id, employee_id)

        incentive.title = title.strip()
        incentive.description = description
        incentive.amount = amount
        incentive.incentive_date = incentive_date
        incentive.incentive_type = incentive_type.value
        incentive.is_taxable = is_taxable
        await self.session.flush()
        return incentive

    async def delete_incentive(
        self, incentive_id: UUID, employee_id: UUID | None = None
    ) -> None:
        incentive = await self.get_incentive(incentive_id, employee_id)
        await self.session.delete(incentive)
        await self.session.flush()

    async def list_incentives(
        self,
        employee_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Sequence[Incentive]:
        """Incentives of an employee, optionally within an inclusive date range."""
        if start_date and end_date and start_date > end_date:
            raise ValidationFailure("Start date must not be after end date")
        await self.employees.require(employee_id)
        query = select(Incentive).where(Incentive.employee_id == employee_id)
        if start_date is not None:
            query = query.where(Incentive.incentive_date >= start_date)
        if end_date is not None:
            query = query.where(Incentive.incentive_date <= end_date)
        result = await self.session.execute(query.order_by(Incentive.incentive_date.desc()))
        return result.scalars().all()
