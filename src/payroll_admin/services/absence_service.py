"""Monthly absence records."""

from __future__ import annotations

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.calculators.matchers import AbsenceThresholdMatcher
from payroll_admin.calculators.providers import AbsenceRecordProvider, EmployeeProvider
from payroll_admin.exceptions import BusinessRuleViolationError, NotFoundError, ValidationFailure
from payroll_admin.models import AbsenceRecord


class AbsenceService:
    """Records absence days, one record per employee and month.

    The matching threshold's percentage is stored on the record for
    reporting; payroll calculation re-matches from ``absence_days``.
    """

    YEARS_BACK = 5
    YEARS_AHEAD = 1

    def __init__(self, session: AsyncSession):
        self.session = session
        self.employees = EmployeeProvider(session)
        self.records = AbsenceRecordProvider(session)
        self.thresholds = AbsenceThresholdMatcher(session)

    def _validate(
        self, absence_days: int, reason: str | None, errors: list[str] | None = None
    ) -> None:
        errors = errors if errors is not None else []
        if not 0 <= absence_days <= 31:
            errors.append("Absence days must be between 0 and 31")
        if reason is not None and len(reason) > 200:
            errors.append("Reason cannot exceed 200 characters")
        if errors:
            raise ValidationFailure("Invalid absence record", errors)

    async def record_absence(
        self,
        employee_id: UUID,
        year: int,
        month: int,
        absence_days: int,
        reason: str | None = None,
    ) -> AbsenceRecord:
        errors: list[str] = []
        this_year = date.today().year
        # Year window applies to new records only
        if not this_year - self.YEARS_BACK <= year <= this_year + self.YEARS_AHEAD:
            errors.append(
                f"Year must be between {this_year - self.YEARS_BACK} "
                f"and {this_year + self.YEARS_AHEAD}"
            )
        if not 1 <= month <= 12:
            errors.append("Month must be between 1 and 12")
        self._validate(absence_days, reason, errors)
        await self.employees.require(employee_id)
        if await self.records.get(employee_id, year, month) is not None:
            raise BusinessRuleViolationError(
                "UniqueAbsenceRecord",
                f"Absence record for {year}-{month:02d} already exists",
            )

        threshold = await self.thresholds.match_threshold(absence_days)
        record = AbsenceRecord(
            employee_id=employee_id,
            year=year,
            month=month,
            absence_days=absence_days,
            adjustment_percentage=threshold.adjustment_percentage if threshold else None,
            reason=reason,
        )
        self.session.add(record)
        await self.session.flush()
        return record

    async def update_absence(
        self,
        absence_record_id: UUID,
        absence_days: int,
        reason: str | None = None,
        employee_id: UUID | None = None,
    ) -> AbsenceRecord:
        record = await self._get_record(absence_record_id, employee_id)
        self._validate(absence_days, reason)

        threshold = await self.thresholds.match_threshold(absence_days)
        record.absence_days = absence_days
        record.adjustment_percentage = threshold.adjustment_percentage if threshold else None
        record.reason = reason
        await self.session.flush()
        return record

    async def delete_absence(
        self, absence_record_id: UUID, employee_id: UUID | None = None
    ) -> None:
        record = await self._get_record(absence_record_id, employee_id)
        await self.session.delete(record)
        await self.session.flush()

    async def _get_record(
        self, absence_record_id: UUID, employee_id: UUID | None
    ) -> AbsenceRecord:
        record = await self.session.get(AbsenceRecord, absence_record_id)
        if record is None or (employee_id is not None and record.employee_id != employee_id):
            raise NotFoundError("AbsenceRecord", absence_record_id)
        return record

    async def list_absences(
        self, employee_id: UUID, year: int | None = None
    ) -> Sequence[AbsenceRecord]:
        await self.employees.require(employee_id)
        query = select(AbsenceRecord).where(AbsenceRecord.employee_id == employee_id)
        if year is not None:
            query = query.where(AbsenceRecord.year == year)
        result = await self.session.execute(
            query.order_by(AbsenceRecord.year.desc(), AbsenceRecord.month.desc())
        )
        return result.scalars().all()
