"""Payroll administration backend with a monthly gross-pay engine."""

__version__ = "0.1.0"
