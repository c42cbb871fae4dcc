"""Inventory Reports

YAML and CSV report output for the web map inventory.
"""

from .report_writer import ReportWriter, build_dependency_rows, DEPENDENCY_COLUMNS

__all__ = ['ReportWriter', 'build_dependency_rows', 'DEPENDENCY_COLUMNS']
