"""Scheduling presentation layer."""

from .composer import FinancialReportComposer

__all__ = ["FinancialReportComposer"]
