"""
Observability layer for advisory exports.

This module provides metrics collection, store quality checks, and
reporting for export runs.

Main exports:
- ExportMetrics: Tracks metrics for an export run
- QualityChecker: Checks the invariants of a loaded index
- QualityCheckResult: Result of a quality check
- RunReporter: Generates Markdown reports
"""
from .metrics import ExportMetrics
from .quality_checks import QualityChecker, QualityCheckResult
from .reporter import RunReporter

__all__ = [
    "ExportMetrics",
    "QualityChecker",
    "QualityCheckResult",
    "RunReporter",
]
