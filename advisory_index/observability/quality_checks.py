"""
Data quality checks for advisory document stores.

This module implements QualityChecker, which checks the invariants of a
loaded Index. Documents written through the index always satisfy them;
these checks catch hand edits and corruption made outside of it.

Checks implemented:
- Unique package names: at most one document per package
- File name matches package: <package>.advisories.yaml
- Unique advisory IDs within each document
- Advisories sorted by ID
- Every advisory has at least one event
- Event timestamps non-decreasing within each advisory
- Vulnerability ID format: CVE, GHSA or PREFIX-rest identifiers

Design decisions:
- Each check returns a QualityCheckResult with pass/fail and details
- Offending items are listed in details for the run report
"""
from collections import Counter
from typing import List, Dict, Any
from dataclasses import dataclass

from documents import file_name_for, is_vulnerability_id


@dataclass
class QualityCheckResult:
    """
    Result of a single quality check.

    Attributes:
        check_name: Unique identifier for the check
        passed: True if check passed, False otherwise
        message: Human-readable summary of the result
        details: Optional dict with additional context (e.g., counts)
    """
    check_name: str
    passed: bool
    message: str
    details: Dict[str, Any] = None


class QualityChecker:
    """
    Runs invariant checks against the documents of an Index.
    """

    def __init__(self, index):
        """
        Initialize quality checker.

        Args:
            index: Loaded storage.Index to check
        """
        self.index = index

    def run_all_checks(self) -> List[QualityCheckResult]:
        """
        Run all quality checks.

        Returns:
            List of QualityCheckResult objects, one per check
        """
        results = []
        results.append(self.check_unique_package_names())
        results.append(self.check_file_names())
        results.append(self.check_unique_advisory_ids())
        results.append(self.check_advisories_sorted())
        results.append(self.check_events_present())
        results.append(self.check_event_order())
        results.append(self.check_vulnerability_id_format())
        return results

    def _documents(self):
        return self.index.select().entries()

    def check_unique_package_names(self) -> QualityCheckResult:
        """
        Ensure no package is claimed by more than one document.

        Critical check: create and update refuse to operate on such packages.
        """
        counts = Counter(doc.package.name for _, doc in self._documents())
        duplicates = sorted(name for name, n in counts.items() if n > 1)

        return QualityCheckResult(
            check_name="unique_package_names",
            passed=not duplicates,
            message=f"{len(duplicates)} packages with multiple documents" if duplicates else "One document per package",
            details={"duplicates": duplicates}
        )

    def check_file_names(self) -> QualityCheckResult:
        """Ensure each file is named after the package it holds."""
        mismatched = sorted(
            file_name for file_name, doc in self._documents()
            if file_name != file_name_for(doc.package.name)
        )

        return QualityCheckResult(
            check_name="file_name_matches_package",
            passed=not mismatched,
            message=f"{len(mismatched)} files not named after their package" if mismatched else "All file names match packages",
            details={"mismatched": mismatched}
        )

    def check_unique_advisory_ids(self) -> QualityCheckResult:
        duplicates = []
        for _, doc in self._documents():
            counts = Counter(adv.id for adv in doc.advisories)
            duplicates.extend(f"{doc.package.name}/{i}" for i, n in sorted(counts.items()) if n > 1)

        return QualityCheckResult(
            check_name="unique_advisory_ids",
            passed=not duplicates,
            message=f"{len(duplicates)} duplicated advisory IDs" if duplicates else "All advisory IDs unique",
            details={"duplicates": duplicates}
        )

    def check_advisories_sorted(self) -> QualityCheckResult:
        unsorted = sorted(
            doc.package.name for _, doc in self._documents()
            if [a.id for a in doc.advisories] != sorted(a.id for a in doc.advisories)
        )

        return QualityCheckResult(
            check_name="advisories_sorted",
            passed=not unsorted,
            message=f"{len(unsorted)} documents with unsorted advisories" if unsorted else "All advisories sorted",
            details={"unsorted": unsorted}
        )

    def check_events_present(self) -> QualityCheckResult:
        """
        Ensure every advisory has at least one event.

        Advisories without events have no status and are left out of exports.
        """
        empty = [
            f"{doc.package.name}/{adv.id}"
            for _, doc in self._documents()
            for adv in doc.advisories
            if not adv.events
        ]

        return QualityCheckResult(
            check_name="events_present",
            passed=not empty,
            message=f"{len(empty)} advisories without events" if empty else "All advisories have events",
            details={"empty": empty}
        )

    def check_event_order(self) -> QualityCheckResult:
        """Ensure events were appended in timestamp order."""
        out_of_order = [
            f"{doc.package.name}/{adv.id}"
            for _, doc in self._documents()
            for adv in doc.advisories
            if any(b.timestamp < a.timestamp for a, b in zip(adv.events, adv.events[1:]))
        ]

        return QualityCheckResult(
            check_name="event_order",
            passed=not out_of_order,
            message=f"{len(out_of_order)} advisories with out-of-order events" if out_of_order else "All event histories ordered",
            details={"out_of_order": out_of_order}
        )

    def check_vulnerability_id_format(self) -> QualityCheckResult:
        invalid = [
            f"{doc.package.name}/{ident}"
            for _, doc in self._documents()
            for adv in doc.advisories
            for ident in (adv.id, *adv.aliases)
            if not is_vulnerability_id(ident)
        ]

        return QualityCheckResult(
            check_name="vulnerability_id_format",
            passed=not invalid,
            message=f"{len(invalid)} invalid vulnerability IDs" if invalid else "All vulnerability IDs valid",
            details={"invalid": invalid}
        )
