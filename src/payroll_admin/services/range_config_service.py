"""Service bracket and absence threshold administration.

Both rule tables are inclusive ranges; an active row may never overlap
another active row. Deleting a rule only deactivates it.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.calculators.matchers import match_absence_threshold, match_service_bracket
from payroll_admin.calculators.ranges import RangeRule, describe_range, find_overlap
from payroll_admin.exceptions import BusinessRuleViolationError, NotFoundError, ValidationFailure
from payroll_admin.models import AbsenceThreshold, ServiceBracket

logger = logging.getLogger(__name__)


def _validate_bounds(
    label: str, minimum: int, maximum: int | None, errors: list[str]
) -> None:
    if minimum < 0:
        errors.append(f"Minimum {label} cannot be negative")
    if maximum is not None and maximum <= minimum:
        errors.append(f"Maximum {label} must be greater than minimum {label}")


def _reject_overlap(
    kind: str,
    minimum: int,
    maximum: int | None,
    existing: Sequence[RangeRule],
    exclude_id: UUID | None = None,
) -> None:
    conflict = find_overlap(minimum, maximum, existing, exclude_id=exclude_id)
    if conflict is not None:
        message = (
            f"{kind} range {describe_range(minimum, maximum)} overlaps active "
            f"{kind.lower()} '{conflict.name}' "
            f"({describe_range(conflict.range_min, conflict.range_max)})"
        )
        raise ValidationFailure(message)


class ServiceBracketService:
    """Administration of years-of-service incentive brackets."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_brackets(self, active_only: bool = False) -> Sequence[ServiceBracket]:
        query = select(ServiceBracket)
        if active_only:
            query = query.where(ServiceBracket.is_active.is_(True))
        result = await self.session.execute(
            query.order_by(ServiceBracket.min_years_of_service, ServiceBracket.name)
        )
        return result.scalars().all()

    async def get_bracket(self, bracket_id: UUID) -> ServiceBracket:
        bracket = await self.session.get(ServiceBracket, bracket_id)
        if bracket is None:
            raise NotFoundError("ServiceBracket", bracket_id)
        return bracket

    async def find_bracket_for_years(self, years: int) -> ServiceBracket | None:
        return match_service_bracket(await self.list_brackets(active_only=True), years)

    async def create_bracket(
        self,
        name: str,
        min_years_of_service: int,
        max_years_of_service: int | None,
        incentive_percentage: Decimal,
        description: str | None = None,
        is_active: bool = True,
    ) -> ServiceBracket:
        """Create a bracket.

        Raises:
            ValidationFailure: On invalid fields or overlap with an active bracket
        """
        self._validate(name, min_years_of_service, max_years_of_service, incentive_percentage)
        if is_active:
            _reject_overlap(
                "Service bracket",
                min_years_of_service,
                max_years_of_service,
                await self.list_brackets(active_only=True),
            )

        bracket = ServiceBracket(
            name=name.strip(),
            min_years_of_service=min_years_of_service,
            max_years_of_service=max_years_of_service,
            incentive_percentage=incentive_percentage,
            description=description,
            is_active=is_active,
        )
        self.session.add(bracket)
        await self.session.flush()
        logger.info(
            "Created service bracket %s (%s years, %s%%)",
            bracket.name,
            describe_range(min_years_of_service, max_years_of_service),
            incentive_percentage,
        )
        return bracket

    async def update_bracket(
        self,
        bracket_id: UUID,
        name: str,
        min_years_of_service: int,
        max_years_of_service: int | None,
        incentive_percentage: Decimal,
        description: str | None = None,
        is_active: bool = True,
    ) -> ServiceBracket:
        """Update a bracket; the bracket itself is excluded from the overlap check."""
        bracket = await self.get_bracket(bracket_id)
        self._validate(name, min_years_of_service, max_years_of_service, incentive_percentage)
        if is_active:
            _reject_overlap(
                "Service bracket",
                min_years_of_service,
                max_years_of_service,
                await self.list_brackets(active_only=True),
                exclude_id=bracket_id,
            )

        bracket.name = name.strip()
        bracket.min_years_of_service = min_years_of_service
        bracket.max_years_of_service = max_years_of_service
        bracket.incentive_percentage = incentive_percentage
        bracket.description = description
        bracket.is_active = is_active
        await self.session.flush()
        return bracket

    async def deactivate_bracket(self, bracket_id: UUID) -> ServiceBracket:
        bracket = await self.get_bracket(bracket_id)
        bracket.is_active = False
        await self.session.flush()
        return bracket

    @staticmethod
    def _validate(
        name: str, minimum: int, maximum: int | None, percentage: Decimal
    ) -> None:
        errors: list[str] = []
        if not name.strip():
            errors.append("Bracket name is required")
        elif len(name.strip()) > 100:
            errors.append("Bracket name cannot exceed 100 characters")
        _validate_bounds("years of service", minimum, maximum, errors)
        if not (Decimal("0") < percentage <= Decimal("100")):
            errors.append("Incentive percentage must be greater than 0 and at most 100")
        if errors:
            raise ValidationFailure("Invalid service bracket", errors)


class AbsenceThresholdService:
    """Administration of absence-day adjustment thresholds."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_thresholds(self, active_only: bool = False) -> Sequence[AbsenceThreshold]:
        query = select(AbsenceThreshold)
        if active_only:
            query = query.where(AbsenceThreshold.is_active.is_(True))
        result = await self.session.execute(
            query.order_by(AbsenceThreshold.min_absence_days, AbsenceThreshold.name)
        )
        return result.scalars().all()

    async def get_threshold(self, threshold_id: UUID) -> AbsenceThreshold:
        threshold = await self.session.get(AbsenceThreshold, threshold_id)
        if threshold is None:
            raise NotFoundError("AbsenceThreshold", threshold_id)
        return threshold

    async def find_threshold_for_days(self, absence_days: int) -> AbsenceThreshold | None:
        return match_absence_threshold(
            await self.list_thresholds(active_only=True), absence_days
        )

    async def create_threshold(
        self,
        name: str,
        min_absence_days: int,
        max_absence_days: int | None,
        adjustment_percentage: Decimal,
        description: str | None = None,
        is_active: bool = True,
    ) -> AbsenceThreshold:
        """Create a threshold.

        Raises:
            ValidationFailure: On invalid fields or overlap with an active threshold
            BusinessRuleViolationError: If the name is already taken
        """
        self._validate(name, min_absence_days, max_absence_days, adjustment_percentage)
        await self._ensure_unique_name(name.strip())
        if is_active:
            _reject_overlap(
                "Absence threshold",
                min_absence_days,
                max_absence_days,
                await self.list_thresholds(active_only=True),
            )

        threshold = AbsenceThreshold(
            name=name.strip(),
            min_absence_days=min_absence_days,
            max_absence_days=max_absence_days,
            adjustment_percentage=adjustment_percentage,
            description=description,
            is_active=is_active,
        )
        self.session.add(threshold)
        await self.session.flush()
        logger.info(
            "Created absence threshold %s (%s days, %s%%)",
            threshold.name,
            describe_range(min_absence_days, max_absence_days),
            adjustment_percentage,
        )
        return threshold

    async def update_threshold(
        self,
        threshold_id: UUID,
        name: str,
        min_absence_days: int,
        max_absence_days: int | None,
        adjustment_percentage: Decimal,
        description: str | None = None,
        is_active: bool = True,
    ) -> AbsenceThreshold:
        threshold = await self.get_threshold(threshold_id)
        self._validate(name, min_absence_days, max_absence_days, adjustment_percentage)
        await self._ensure_unique_name(name.strip(), exclude_id=threshold_id)
        if is_active:
            _reject_overlap(
                "Absence threshold",
                min_absence_days,
                max_absence_days,
                await self.list_thresholds(active_only=True),
                exclude_id=threshold_id,
            )

        threshold.name = name.strip()
        threshold.min_absence_days = min_absence_days
        threshold.max_absence_days = max_absence_days
        threshold.adjustment_percentage = adjustment_percentage
        threshold.description = description
        threshold.is_active = is_active
        await self.session.flush()
        return threshold

    async def deactivate_threshold(self, threshold_id: UUID) -> AbsenceThreshold:
        threshold = await self.get_threshold(threshold_id)
        threshold.is_active = False
        await self.session.flush()
        return threshold

    async def _ensure_unique_name(self, name: str, exclude_id: UUID | None = None) -> None:
        query = select(AbsenceThreshold.absence_threshold_id).where(
            func.lower(AbsenceThreshold.name) == name.lower()
        )
        if exclude_id is not None:
            query = query.where(AbsenceThreshold.absence_threshold_id != exclude_id)
        if await self.session.scalar(query) is not None:
            raise BusinessRuleViolationError(
                "UniqueAbsenceThresholdName", f"Absence threshold '{name}' already exists"
            )

    @staticmethod
    def _validate(
        name: str, minimum: int, maximum: int | None, percentage: Decimal
    ) -> None:
        errors: list[str] = []
        if not name.strip():
            errors.append("Threshold name is required")
        elif len(name.strip()) > 50:
            errors.append("Threshold name cannot exceed 50 characters")
        _validate_bounds("absence days", minimum, maximum, errors)
        if not (Decimal("-100") <= percentage <= Decimal("100")):
            errors.append("Adjustment percentage must be between -100 and 100")
        if errors:
            raise ValidationFailure("Invalid absence threshold", errors)
