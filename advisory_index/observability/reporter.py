"""
Generate human-readable export reports in Markdown format.

This module provides RunReporter, which transforms ExportMetrics and
quality check results into formatted Markdown reports.

Report sections:
- Header with run metadata (ID, timestamp, duration)
- Summary table with core metrics
- Status distribution of folded advisories
- Advisories skipped for having no events
- Data quality check results per advisories directory

Design decisions:
- Markdown output for readability and version control friendliness
- Uses tabulate library for clean table formatting (GitHub-flavored)
- Reports saved with timestamp for historical tracking
"""
from datetime import datetime
from typing import Dict, List
from pathlib import Path
from tabulate import tabulate

from .metrics import ExportMetrics
from .quality_checks import QualityCheckResult


class RunReporter:
    """
    Generates Markdown reports from export run metrics.
    """

    def generate_report(
        self,
        metrics: ExportMetrics,
        quality_results: Dict[str, List[QualityCheckResult]]
    ) -> str:
        """
        Generate full run report in Markdown format.

        Args:
            metrics: ExportMetrics object from a completed export
            quality_results: Quality check results keyed by advisories directory

        Returns:
            Markdown-formatted report as string
        """
        lines = []

        lines.append("# Security Database Export Report")
        lines.append(f"**Run ID:** {metrics.run_id}")
        lines.append(f"**Started:** {metrics.started_at.isoformat()}")
        if metrics.completed_at:
            duration = (metrics.completed_at - metrics.started_at).total_seconds()
            lines.append(f"**Duration:** {duration:.1f} seconds")
        lines.append("")

        lines.append("## Summary")
        summary_data = [
            ["Advisory Indices", metrics.indices_total],
            ["Documents", metrics.documents_total],
            ["Packages Exported", metrics.packages_exported],
            ["Advisories Folded", metrics.advisories_folded],
            ["Skipped (no events)", len(metrics.skipped_advisories)],
            ["Errors", metrics.errors],
        ]
        lines.append(tabulate(summary_data, headers=["Metric", "Value"], tablefmt="github"))
        lines.append("")

        if metrics.status_counts:
            lines.append("## Status Distribution")
            status_data = [[k, v] for k, v in sorted(metrics.status_counts.items())]
            lines.append(tabulate(status_data, headers=["Status", "Count"], tablefmt="github"))
            lines.append("")

        if metrics.skipped_advisories:
            lines.append("## Skipped Advisories")
            lines.append(tabulate([[s] for s in metrics.skipped_advisories], headers=["Advisory"], tablefmt="github"))
            lines.append("")

        for source, results in quality_results.items():
            lines.append(f"## Data Quality Checks: {source}")
            quality_data = []
            for qr in results:
                status = "✓" if qr.passed else "✗"
                quality_data.append([status, qr.check_name, qr.message])
            lines.append(tabulate(quality_data, headers=["Status", "Check", "Details"], tablefmt="github"))
            lines.append("")

        return "\n".join(lines)

    def save_report(self, report: str, output_dir: Path) -> Path:
        """
        Save report to file with timestamp.

        Args:
            report: Markdown report content
            output_dir: Directory to save report in

        Returns:
            Path to saved report file
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.utcnow().strftime("%Y%m%d-%H%M%S")
        filepath = output_dir / f"export-report-{timestamp}.md"
        filepath.write_text(report)
        return filepath
