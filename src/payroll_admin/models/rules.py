"""Configurable range rules: service brackets and absence thresholds."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from payroll_admin.models.base import Base, TimestampMixin


class ServiceBracket(Base, TimestampMixin):
    """Years-of-service range mapped to an incentive percentage.

    Bounds are inclusive; a null maximum is unbounded. Active brackets never
    overlap (checked on write by the bracket service).
    """

    __tablename__ = "service_bracket"

    service_bracket_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    min_years_of_service: Mapped[int] = mapped_column(Integer, nullable=False)
    max_years_of_service: Mapped[int | None] = mapped_column(Integer, nullable=True)
    incentive_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("min_years_of_service >= 0", name="service_bracket_min_check"),
        CheckConstraint(
            "max_years_of_service IS NULL OR max_years_of_service > min_years_of_service",
            name="service_bracket_range_check",
        ),
    )

    @property
    def range_min(self) -> int:
        return self.min_years_of_service

    @property
    def range_max(self) -> int | None:
        return self.max_years_of_service

    @property
    def rule_id(self) -> UUID:
        return self.service_bracket_id


class AbsenceThreshold(Base, TimestampMixin):
    """Absence-day range mapped to a signed attendance adjustment."""

    __tablename__ = "absence_threshold"

    absence_threshold_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    min_absence_days: Mapped[int] = mapped_column(Integer, nullable=False)
    max_absence_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    adjustment_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("min_absence_days >= 0", name="absence_threshold_min_check"),
        CheckConstraint(
            "max_absence_days IS NULL OR max_absence_days > min_absence_days",
            name="absence_threshold_range_check",
        ),
    )

    @property
    def range_min(self) -> int:
        return self.min_absence_days

    @property
    def range_max(self) -> int | None:
        return self.max_absence_days

    @property
    def rule_id(self) -> UUID:
        return self.absence_threshold_id
