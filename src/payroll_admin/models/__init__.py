"""ORM models."""

from payroll_admin.models.base import Base, TimestampMixin
from payroll_admin.models.employee import (
    AbsenceRecord,
    Employee,
    EmploymentStatus,
    Incentive,
    IncentiveType,
    SalaryRecord,
)
from payroll_admin.models.organization import (
    Department,
    DepartmentIncentiveHistory,
    JobGrade,
)
from payroll_admin.models.payroll import PayrollSnapshot
from payroll_admin.models.rules import AbsenceThreshold, ServiceBracket

__all__ = [
    "AbsenceRecord",
    "AbsenceThreshold",
    "Base",
    "Department",
    "DepartmentIncentiveHistory",
    "Employee",
    "EmploymentStatus",
    "Incentive",
    "IncentiveType",
    "JobGrade",
    "PayrollSnapshot",
    "SalaryRecord",
    "ServiceBracket",
    "TimestampMixin",
]
