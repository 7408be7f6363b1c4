"""
Scan result handling.

Models scan engine findings and removes the ones advisories already
account for.
"""
from .filter import (
    VALID_ADVISORIES_SETS,
    AdvisoriesSet,
    InvalidAdvisoriesSet,
    filter_with_advisories,
    parse_advisories_set,
)
from .findings import Finding, Package, Result, Vulnerability
from .http_client import HttpClient, RetryConfig
from .input import load_result

__all__ = [
    "AdvisoriesSet",
    "Finding",
    "HttpClient",
    "InvalidAdvisoriesSet",
    "Package",
    "Result",
    "RetryConfig",
    "VALID_ADVISORIES_SETS",
    "Vulnerability",
    "filter_with_advisories",
    "load_result",
    "parse_advisories_set",
]
