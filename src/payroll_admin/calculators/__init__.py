"""Gross-pay calculation components."""

from payroll_admin.calculators.engine import PayrollCalculator
from payroll_admin.calculators.incentive_lookup import DepartmentIncentiveLookup
from payroll_admin.calculators.matchers import (
    AbsenceThresholdMatcher,
    ServiceBracketMatcher,
    match_absence_threshold,
    match_service_bracket,
    years_of_service,
)
from payroll_admin.calculators.ranges import find_overlap, ranges_overlap
from payroll_admin.calculators.salary_resolver import SalaryNotFoundError, SalaryResolver
from payroll_admin.calculators.types import RateRule, RateTables, SnapshotCalculation

__all__ = [
    "AbsenceThresholdMatcher",
    "DepartmentIncentiveLookup",
    "PayrollCalculator",
    "RateRule",
    "RateTables",
    "SalaryNotFoundError",
    "SalaryResolver",
    "ServiceBracketMatcher",
    "SnapshotCalculation",
    "find_overlap",
    "match_absence_threshold",
    "match_service_bracket",
    "ranges_overlap",
    "years_of_service",
]
