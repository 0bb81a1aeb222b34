"""Application services."""

from payroll_admin.services.absence_service import AbsenceService
from payroll_admin.services.dashboard_service import DashboardService
from payroll_admin.services.department_service import DepartmentService, JobGradeService
from payroll_admin.services.employee_service import EmployeeService
from payroll_admin.services.incentive_service import IncentiveService
from payroll_admin.services.payroll_service import PayrollService
from payroll_admin.services.period_lock import PeriodLockRegistry
from payroll_admin.services.range_config_service import (
    AbsenceThresholdService,
    ServiceBracketService,
)
from payroll_admin.services.reporting_service import ReportingService
from payroll_admin.services.salary_service import SalaryService

__all__ = [
    "AbsenceService",
    "AbsenceThresholdService",
    "DashboardService",
    "DepartmentService",
    "EmployeeService",
    "IncentiveService",
    "JobGradeService",
    "PayrollService",
    "PeriodLockRegistry",
    "ReportingService",
    "SalaryService",
    "ServiceBracketService",
]
