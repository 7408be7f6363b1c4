"""
Metrics collection for export runs.

This module provides ExportMetrics, a dataclass that tracks observability
metrics for a single security database export including:
- Counts of documents read and packages exported
- Distribution of folded advisory statuses
- Advisories skipped because they have no events
- Errors encountered

Design decisions:
- Single metrics object per run for simplicity
- Defaultdict used for automatic initialization of counters
- Serializable to_dict() for JSON output alongside the report
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Any
from collections import defaultdict


@dataclass
class ExportMetrics:
    """
    Metrics for a single export run.

    Tracks counts, status distribution, skipped advisories and errors.
    """
    run_id: str
    started_at: datetime
    completed_at: datetime = None

    # Core counts
    indices_total: int = 0
    documents_total: int = 0
    packages_exported: int = 0
    advisories_folded: int = 0
    errors: int = 0

    # Folded status distribution
    # Key: state (e.g., "fixed"), Value: count
    status_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    # "package/advisory" identifiers with no events
    skipped_advisories: List[str] = field(default_factory=list)

    quality_issues: List[Dict] = field(default_factory=list)

    def record_status(self, state: str):
        """
        Record the folded status of one advisory.

        Args:
            state: Status state (e.g., "fixed", "false_positive")
        """
        self.advisories_folded += 1
        self.status_counts[state] += 1

    def record_skipped(self, package: str, advisory_id: str):
        """Record an advisory left out of the export for having no events."""
        self.skipped_advisories.append(f"{package}/{advisory_id}")

    def record_error(self, error: str, context: Dict = None):
        """
        Record an error encountered during the run.

        Args:
            error: Error message
            context: Optional dict with additional context (e.g., advisories dir)
        """
        self.errors += 1
        self.quality_issues.append({
            "type": "error",
            "message": error,
            "context": context or {}
        })

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert metrics to dictionary for JSON serialization.

        Returns:
            Dictionary representation suitable for JSON storage
        """
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "indices_total": self.indices_total,
            "documents_total": self.documents_total,
            "packages_exported": self.packages_exported,
            "advisories_folded": self.advisories_folded,
            "errors": self.errors,
            "status_counts": dict(self.status_counts),
            "skipped_advisories": list(self.skipped_advisories),
            "quality_issues": self.quality_issues
        }
