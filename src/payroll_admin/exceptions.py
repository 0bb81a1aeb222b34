"""Domain exceptions raised by services and calculators."""

from __future__ import annotations

from typing import Any
from uuid import UUID


class PayrollAdminError(Exception):
    """Base class for domain errors surfaced to API callers."""

    code = "PAYROLL_ERROR"

    @property
    def context(self) -> dict[str, Any]:
        return {}


class NotFoundError(PayrollAdminError):
    """Raised when a required entity does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, identifier: Any, message: str | None = None):
        self.entity = entity
        self.identifier = identifier
        super().__init__(
            message or f'Entity "{entity}" with ID {identifier} was not found.'
        )

    @property
    def context(self) -> dict[str, Any]:
        return {"entity": self.entity, "id": str(self.identifier)}


class ValidationFailure(PayrollAdminError):
    """Raised when input violates a field or range rule."""

    code = "VALIDATION_FAILED"

    def __init__(self, message: str, errors: list[str] | None = None):
        self.message = message
        self.errors = errors or [message]
        super().__init__(message)

    @property
    def context(self) -> dict[str, Any]:
        return {"errors": self.errors}


class DuplicatePeriodError(PayrollAdminError):
    """Raised when a snapshot exists and regeneration was not requested."""

    code = "DUPLICATE_PERIOD"

    def __init__(self, employee_id: UUID, year: int, month: int):
        self.employee_id = employee_id
        self.year = year
        self.month = month
        super().__init__(
            f"Payroll snapshot for employee {employee_id} "
            f"already exists for {year}-{month:02d}"
        )

    @property
    def context(self) -> dict[str, Any]:
        return {
            "employee_id": str(self.employee_id),
            "year": self.year,
            "month": self.month,
        }


class BusinessRuleViolationError(PayrollAdminError):
    """Raised when an operation breaches a domain rule."""

    code = "BUSINESS_RULE_VIOLATION"

    def __init__(self, rule: str, message: str):
        self.rule = rule
        self.message = message
        super().__init__(f"Business rule '{rule}' was violated: {message}")

    @property
    def context(self) -> dict[str, Any]:
        return {"rule": self.rule}


class PeriodLockedError(BusinessRuleViolationError):
    """Raised when another process is generating the same period."""

    code = "PERIOD_LOCKED"

    def __init__(self, year: int, month: int):
        self.year = year
        self.month = month
        super().__init__(
            "PeriodLock",
            f"payroll generation for {year}-{month:02d} is already in progress",
        )
