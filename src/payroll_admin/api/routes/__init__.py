"""API routes."""

from payroll_admin.api.routes.configuration import brackets_router, thresholds_router
from payroll_admin.api.routes.dashboard import router as dashboard_router
from payroll_admin.api.routes.employees import router as employees_router
from payroll_admin.api.routes.health import router as health_router
from payroll_admin.api.routes.organization import departments_router, job_grades_router
from payroll_admin.api.routes.payroll import router as payroll_router
from payroll_admin.api.routes.reports import router as reports_router

__all__ = [
    "brackets_router",
    "dashboard_router",
    "departments_router",
    "employees_router",
    "health_router",
    "job_grades_router",
    "payroll_router",
    "reports_router",
    "thresholds_router",
]
