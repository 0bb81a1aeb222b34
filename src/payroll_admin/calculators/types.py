"""Type definitions for the calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from payroll_admin.models import AbsenceThreshold, PayrollSnapshot, ServiceBracket


@dataclass(frozen=True)
class RateRule:
    """Immutable copy of a service bracket or absence threshold row."""

    rule_id: UUID
    name: str
    range_min: int
    range_max: int | None
    percentage: Decimal
    is_active: bool = True

    @classmethod
    def from_bracket(cls, bracket: ServiceBracket) -> RateRule:
        return cls(
            rule_id=bracket.service_bracket_id,
            name=bracket.name,
            range_min=bracket.min_years_of_service,
            range_max=bracket.max_years_of_service,
            percentage=bracket.incentive_percentage,
            is_active=bracket.is_active,
        )

    @classmethod
    def from_threshold(cls, threshold: AbsenceThreshold) -> RateRule:
        return cls(
            rule_id=threshold.absence_threshold_id,
            name=threshold.name,
            range_min=threshold.min_absence_days,
            range_max=threshold.max_absence_days,
            percentage=threshold.adjustment_percentage,
            is_active=threshold.is_active,
        )


@dataclass(frozen=True)
class RateTables:
    """Configuration read once per calculation call.

    Every employee in a call is computed against the same view, even if the
    underlying tables change while the call is running.
    """

    brackets: tuple[RateRule, ...]
    thresholds: tuple[RateRule, ...]
    department_incentives: dict[UUID, Decimal | None] = field(default_factory=dict)


@dataclass(frozen=True)
class SnapshotCalculation:
    """Gross pay computed for one employee and month, before persistence."""

    employee_id: UUID
    year: int
    month: int
    as_of_date: date
    base_salary: Decimal
    years_of_service: int
    department_incentive_percentage: Decimal | None
    department_incentive_amount: Decimal
    service_years_incentive_percentage: Decimal | None
    service_years_incentive_amount: Decimal
    attendance_adjustment_percentage: Decimal | None
    attendance_adjustment_amount: Decimal
    absence_days: int | None
    gross_salary: Decimal
    service_bracket_name: str | None = None
    absence_threshold_name: str | None = None

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict of the inputs used (deterministic ordering)."""
        return {
            "employee_id": str(self.employee_id),
            "period": f"{self.year:04d}-{self.month:02d}",
            "as_of_date": self.as_of_date.isoformat(),
            "base_salary": str(self.base_salary),
            "years_of_service": self.years_of_service,
            "department_incentive_percentage": _opt_str(self.department_incentive_percentage),
            "service_years_incentive_percentage": _opt_str(
                self.service_years_incentive_percentage
            ),
            "attendance_adjustment_percentage": _opt_str(
                self.attendance_adjustment_percentage
            ),
            "absence_days": self.absence_days,
        }


def _opt_str(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


@dataclass(frozen=True)
class EmployeeFailure:
    """An employee skipped by a batch run, with the reason."""

    employee_id: UUID
    employee_number: str
    error: str
    code: str


@dataclass
class BatchCalculationResult:
    """Result of calculating one period for all active employees."""

    year: int
    month: int
    total_employees: int = 0
    snapshots: list[PayrollSnapshot] = field(default_factory=list)
    failures: list[EmployeeFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def success_count(self) -> int:
        return len(self.snapshots)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def success_ratio(self) -> Decimal:
        if self.total_employees == 0:
            return Decimal("1")
        return Decimal(self.success_count) / Decimal(self.total_employees)

    @property
    def total_gross(self) -> Decimal:
        return sum((s.gross_salary for s in self.snapshots), Decimal("0"))
