"""
Lightweight validation tests for the observability layer.

These tests verify:
- ExportMetrics tracks folded statuses and skipped advisories
- ExportMetrics serializes to dict properly
- QualityChecker flags hand-edited documents that break store invariants
- RunReporter generates valid Markdown output
"""
from datetime import datetime

from documents import Advisory, encode_document
from observability import ExportMetrics, QualityChecker, QualityCheckResult, RunReporter
from storage import Index, MemoryStore
from conftest import false_positive_event, fixed_event, make_document


def test_export_metrics_tracks_statuses():
    """Verify ExportMetrics counts every folded status."""
    metrics = ExportMetrics(run_id="test_run", started_at=datetime.utcnow())

    metrics.record_status("fixed")
    metrics.record_status("fixed")
    metrics.record_status("false_positive")
    metrics.record_skipped("curl", "CVE-2024-0009")

    assert metrics.advisories_folded == 3
    assert metrics.status_counts["fixed"] == 2
    assert metrics.skipped_advisories == ["curl/CVE-2024-0009"]


def test_export_metrics_serialization():
    """Verify ExportMetrics can be serialized to dict."""
    metrics = ExportMetrics(
        run_id="test_run",
        started_at=datetime(2024, 1, 15, 12, 0, 0),
        completed_at=datetime(2024, 1, 15, 12, 5, 30)
    )

    metrics.documents_total = 10
    metrics.packages_exported = 8
    metrics.record_status("fixed")
    metrics.record_error("boom", {"dir": "advisories"})

    data = metrics.to_dict()

    assert data["run_id"] == "test_run"
    assert data["documents_total"] == 10
    assert data["packages_exported"] == 8
    assert data["status_counts"] == {"fixed": 1}
    assert data["errors"] == 1
    assert data["quality_issues"][0]["context"] == {"dir": "advisories"}
    assert isinstance(data["started_at"], str)  # ISO format


def test_quality_checker_passes_clean_index(curl_index):
    """Verify a store written through the index passes every check."""
    results = QualityChecker(curl_index).run_all_checks()

    assert len(results) == 7
    assert all(r.passed for r in results)
    assert all(isinstance(r, QualityCheckResult) for r in results)


def test_quality_checker_flags_hand_edits():
    """Verify hand-edited documents are reported by the matching check."""
    curl = make_document(
        "curl",
        Advisory(id="CVE-2024-0002", events=(fixed_event("8.4.0", minutes=10), false_positive_event(minutes=0))),
        Advisory(id="CVE-2024-0001", aliases=("not an id",)),
    )
    store = MemoryStore({
        "curl.advisories.yaml": encode_document(curl),
        "curl-copy.advisories.yaml": encode_document(curl),
    })
    index = Index.load(store)

    results = {r.check_name: r for r in QualityChecker(index).run_all_checks()}

    assert not results["unique_package_names"].passed
    assert results["unique_package_names"].details["duplicates"] == ["curl"]
    assert results["file_name_matches_package"].details["mismatched"] == ["curl-copy.advisories.yaml"]
    assert results["unique_advisory_ids"].passed
    assert not results["advisories_sorted"].passed
    assert not results["events_present"].passed
    assert not results["event_order"].passed
    assert results["vulnerability_id_format"].details["invalid"] == ["curl/not an id", "curl/not an id"]


def test_reporter_generates_markdown():
    """Verify RunReporter produces valid Markdown."""
    metrics = ExportMetrics(
        run_id="test_run",
        started_at=datetime(2024, 1, 15, 12, 0, 0),
        completed_at=datetime(2024, 1, 15, 12, 5, 30)
    )
    metrics.packages_exported = 2
    metrics.record_status("fixed")
    metrics.record_skipped("curl", "CVE-2024-0009")

    quality_results = {
        "advisories": [
            QualityCheckResult(check_name="events_present", passed=True, message="All advisories have events"),
            QualityCheckResult(check_name="event_order", passed=False, message="1 advisories with out-of-order events"),
        ]
    }

    report = RunReporter().generate_report(metrics, quality_results)

    assert "# Security Database Export Report" in report
    assert "test_run" in report
    assert "## Summary" in report
    assert "## Status Distribution" in report
    assert "curl/CVE-2024-0009" in report
    assert "## Data Quality Checks: advisories" in report
    assert "✗" in report
    assert "Duration:** 330.0 seconds" in report


def test_reporter_saves_report(temp_dir):
    """Verify reports are written under the output directory."""
    path = RunReporter().save_report("# Report", temp_dir / "reports")

    assert path.parent == temp_dir / "reports"
    assert path.name.startswith("export-report-")
    assert path.read_text() == "# Report"
