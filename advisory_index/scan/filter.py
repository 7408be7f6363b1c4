"""
Filter scan findings using advisory data.

A finding is dropped when the package it was found in has an advisory for
the same vulnerability (matched by ID or alias on either side) in any of
the supplied indices, and that advisory's current status falls in the
active advisories set. Findings without any matching advisory are kept.
"""
import logging
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from decisioning import DEFAULT_STATUS_TABLE, Status, StatusTable, current_status
from decisioning.status import FALSE_POSITIVE, FIXED
from storage import Index
from .findings import Finding


logger = logging.getLogger(__name__)


class AdvisoriesSet(Enum):
    """Which advisories are allowed to suppress a finding."""
    NONE = "none"
    FIXED = "fixed"
    RESOLVED = "resolved"
    CONCLUDED = "concluded"
    ALL = "all"

    def excludes(self, status: Optional[Status]) -> bool:
        if status is None or self is AdvisoriesSet.NONE:
            return False
        if self is AdvisoriesSet.FIXED:
            return status.state == FIXED
        if self is AdvisoriesSet.RESOLVED:
            return status.state in (FIXED, FALSE_POSITIVE)
        if self is AdvisoriesSet.CONCLUDED:
            return status.is_final
        return True


VALID_ADVISORIES_SETS = [s.value for s in AdvisoriesSet]


class InvalidAdvisoriesSet(ValueError):
    """Raised for an advisories set name outside the whitelist."""


def parse_advisories_set(name) -> AdvisoriesSet:
    """
    Raises:
        InvalidAdvisoriesSet: If ``name`` is not one of VALID_ADVISORIES_SETS
    """
    if isinstance(name, AdvisoriesSet):
        return name
    try:
        return AdvisoriesSet(name)
    except ValueError:
        raise InvalidAdvisoriesSet(
            f"invalid advisory filter set {name!r}, must be one of [{', '.join(VALID_ADVISORIES_SETS)}]"
        ) from None


def matching_statuses(
    finding: Finding,
    indices: Sequence[Index],
    table: StatusTable = DEFAULT_STATUS_TABLE,
) -> List[Status]:
    """Current status of every advisory matching ``finding`` across ``indices``."""
    vulnerability = finding.vulnerability
    statuses = []
    for index in indices:
        for document in index.select().where_name(finding.package.name).configurations():
            advisory = document.find(vulnerability.id, vulnerability.aliases)
            if advisory is None:
                continue
            status = current_status(advisory, table)
            if status is not None:
                statuses.append(status)
    return statuses


def filter_with_advisories(
    findings: Iterable[Finding],
    indices: Sequence[Index],
    advisories_set,
    table: StatusTable = DEFAULT_STATUS_TABLE,
) -> List[Finding]:
    """
    Remove findings already handled according to ``advisories_set``.

    Args:
        findings: Findings from the scan engine
        indices: Advisory indices to consult
        advisories_set: AdvisoriesSet or its name
        table: Event kind -> status mapping

    Returns:
        The findings that remain, in their original order

    Raises:
        InvalidAdvisoriesSet: If the set name is not recognized
    """
    policy = parse_advisories_set(advisories_set)
    findings = list(findings)

    if policy is AdvisoriesSet.NONE:
        return findings

    kept = []
    for finding in findings:
        statuses = matching_statuses(finding, indices, table)
        if any(policy.excludes(s) for s in statuses):
            logger.debug(
                f"Filtered {finding.vulnerability.id} in {finding.package.name} "
                f"({', '.join(s.state for s in statuses)})"
            )
            continue
        kept.append(finding)

    logger.info(f"Advisory filter {policy.value!r}: kept {len(kept)} of {len(findings)} findings")
    return kept
