"""
Build an Alpine-style security database ("secfixes" feed) from advisories.

Every advisory is folded to its current status. Fixed advisories are
grouped under their fixed version; false positives are grouped under the
NAK key "0", which the feed format uses for "not a real vulnerability".
Other statuses do not appear in the feed.

Output format (JSON, indent 2):
{
  "apkurl": "{{urlprefix}}/{{reponame}}/{{arch}}/{{pkg.name}}-{{pkg.ver}}.apk",
  "archs": ["x86_64"],
  "reponame": "os",
  "urlprefix": "https://packages.example.dev",
  "packages": [
    {"pkg": {"name": "curl", "secfixes": {"8.4.0": ["CVE-2024-0001"]}}}
  ]
}
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from decisioning import DEFAULT_STATUS_TABLE, StatusTable, current_status
from decisioning.status import FALSE_POSITIVE, FIXED
from documents import Document
from observability.metrics import ExportMetrics
from storage import Index
from .errors import NoSecurityData


logger = logging.getLogger(__name__)

APK_URL = "{{urlprefix}}/{{reponame}}/{{arch}}/{{pkg.name}}-{{pkg.ver}}.apk"

# Secfixes key for vulnerabilities determined not to affect the package.
NAK = "0"


@dataclass
class BuildSecurityDatabaseOptions:
    advisory_doc_indices: List[Index]
    url_prefix: str = ""
    archs: List[str] = field(default_factory=list)
    repo: str = ""


@dataclass
class PackageEntry:
    name: str
    secfixes: Dict[str, List[str]]

    def to_dict(self) -> Dict:
        return {"pkg": {"name": self.name, "secfixes": self.secfixes}}


def secfixes_for(
    document: Document,
    table: StatusTable = DEFAULT_STATUS_TABLE,
    metrics: Optional[ExportMetrics] = None,
) -> Dict[str, List[str]]:
    """
    Group a document's advisory IDs by target version.

    Returns:
        Mapping of fixed version (or NAK) -> sorted, de-duplicated IDs;
        versions in sorted order
    """
    groups: Dict[str, set] = {}

    for advisory in sorted(document.advisories, key=lambda a: a.id):
        status = current_status(advisory, table)
        if status is None:
            if metrics:
                metrics.record_skipped(document.package.name, advisory.id)
            continue

        if metrics:
            metrics.record_status(status.state)

        if status.state == FIXED:
            groups.setdefault(status.fixed_version, set()).add(advisory.id)
        elif status.state == FALSE_POSITIVE:
            groups.setdefault(NAK, set()).add(advisory.id)

    return {version: sorted(groups[version]) for version in sorted(groups)}


def build_package_entries(
    index: Index,
    table: StatusTable = DEFAULT_STATUS_TABLE,
    metrics: Optional[ExportMetrics] = None,
) -> List[PackageEntry]:
    """Package entries for one index; documents with nothing to report are skipped."""
    entries = []
    for document in index.select().configurations():
        if metrics:
            metrics.documents_total += 1

        if not document.advisories:
            continue

        secfixes = secfixes_for(document, table, metrics)
        if not secfixes:
            continue

        entries.append(PackageEntry(name=document.package.name, secfixes=secfixes))

    return entries


def build_security_database(
    opts: BuildSecurityDatabaseOptions,
    table: StatusTable = DEFAULT_STATUS_TABLE,
    metrics: Optional[ExportMetrics] = None,
) -> bytes:
    """
    Build the security database for all indices in ``opts``.

    Args:
        opts: Indices to export plus repository metadata copied verbatim
        table: Event kind -> status mapping used to fold advisories
        metrics: Optional ExportMetrics to update

    Returns:
        JSON-encoded security database

    Raises:
        NoSecurityData: If any index contributes no package entries, which
            usually means a wrong or empty advisories directory
    """
    package_entries: List[PackageEntry] = []

    for index in opts.advisory_doc_indices:
        index_entries = build_package_entries(index, table, metrics)
        if not index_entries:
            raise NoSecurityData(f"no package security data found in {index.store!r}")

        logger.info(f"Exporting {len(index_entries)} packages from {index.store!r}")
        package_entries.extend(index_entries)

    if metrics:
        metrics.packages_exported = len(package_entries)

    db = {
        "apkurl": APK_URL,
        "archs": list(opts.archs),
        "reponame": opts.repo,
        "urlprefix": opts.url_prefix,
        "packages": [pe.to_dict() for pe in package_entries],
    }

    return json.dumps(db, indent=2).encode("utf-8")
