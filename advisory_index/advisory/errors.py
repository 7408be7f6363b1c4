"""
Errors raised by advisory operations.
"""
from typing import List


class AdvisoryError(Exception):
    """Base class for advisory operation errors."""


class InvalidRequest(AdvisoryError):
    """Caller-supplied request data failed validation."""

    def __init__(self, problems: List[str]):
        self.problems = problems
        super().__init__(f"invalid advisory request: {'; '.join(problems)}")


class AmbiguousPackage(AdvisoryError):
    """More than one document claims the same package."""

    def __init__(self, package: str, count: int):
        self.package = package
        self.count = count
        super().__init__(f"found {count} advisory documents for package {package!r}")


class DuplicateAdvisory(AdvisoryError):
    def __init__(self, package: str, vulnerability_id: str):
        self.package = package
        self.vulnerability_id = vulnerability_id
        super().__init__(f"advisory {vulnerability_id!r} already exists for {package!r}")


class AdvisoryNotFound(AdvisoryError):
    def __init__(self, package: str, vulnerability_id: str):
        self.package = package
        self.vulnerability_id = vulnerability_id
        super().__init__(f"advisory {vulnerability_id!r} does not exist for {package!r}")


class NoSecurityData(AdvisoryError):
    """An advisories index contributed no package entries to an export."""
