"""Service-year bracket and absence threshold matching."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.calculators.ranges import R, range_contains
from payroll_admin.models import AbsenceThreshold, ServiceBracket


def years_of_service(hire_date: date, reference_date: date) -> int:
    """Whole years completed between hire date and reference date.

    A year counts only once its anniversary has been reached; an employee
    hired after the reference date has zero years.
    """
    years = reference_date.year - hire_date.year
    if (reference_date.month, reference_date.day) < (hire_date.month, hire_date.day):
        years -= 1
    return max(years, 0)


def _match_range(rules: Iterable[R], value: int) -> R | None:
    # Active ranges never overlap, so the lowest matching minimum is the only one
    matches = [
        rule
        for rule in rules
        if rule.is_active and range_contains(rule.range_min, rule.range_max, value)
    ]
    if not matches:
        return None
    return min(matches, key=lambda rule: rule.range_min)


def match_service_bracket(brackets: Iterable[R], years: int) -> R | None:
    """Return the active bracket containing ``years``, if any."""
    return _match_range(brackets, years)


def match_absence_threshold(thresholds: Iterable[R], absence_days: int) -> R | None:
    """Return the active threshold containing ``absence_days``, if any."""
    return _match_range(thresholds, absence_days)


class ServiceBracketMatcher:
    """Finds the incentive bracket for a years-of-service value."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def active_brackets(self) -> Sequence[ServiceBracket]:
        result = await self.session.execute(
            select(ServiceBracket)
            .where(ServiceBracket.is_active.is_(True))
            .order_by(ServiceBracket.min_years_of_service)
        )
        return result.scalars().all()

    async def match_bracket(self, years: int) -> ServiceBracket | None:
        """Match against the currently active brackets.

        Returns None when no bracket covers ``years``; callers treat that as
        a zero incentive.
        """
        return match_service_bracket(await self.active_brackets(), years)


class AbsenceThresholdMatcher:
    """Finds the attendance adjustment for an absence-day count."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def active_thresholds(self) -> Sequence[AbsenceThreshold]:
        result = await self.session.execute(
            select(AbsenceThreshold)
            .where(AbsenceThreshold.is_active.is_(True))
            .order_by(AbsenceThreshold.min_absence_days)
        )
        return result.scalars().all()

    async def match_threshold(self, absence_days: int) -> AbsenceThreshold | None:
        return match_absence_threshold(await self.active_thresholds(), absence_days)
