"""
Advisory document model: one document per package.

A document lists every vulnerability tracked for a package. Each advisory
holds an append-only history of events; the current status of an advisory
is never stored, it is derived from the history (see decisioning.status).

YAML shape:

    schema-version: 2.0.1
    package:
      name: curl
    advisories:
      - id: CVE-2024-0001
        aliases:
          - GHSA-xxxx-xxxx-xxxx
        events:
          - timestamp: 2024-01-15T12:00:00Z
            type: fixed
            data:
              fixed-version: 8.4.0

Design decisions:
- Frozen dataclasses with tuples, so a loaded document can be handed to
  an update function without anyone holding a live mutable reference
- Tag/payload agreement is enforced by Event at construction time
- Invariants needed for a write are checked by Document.validate(), which
  reports every violation instead of stopping at the first
"""
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from .events import Event, EventValidationError


SCHEMA_VERSION = "2.0.1"
SUPPORTED_SCHEMA_VERSIONS = {"2", "2.0.0", "2.0.1"}

FILE_SUFFIX = ".advisories.yaml"


class DocumentFormatError(ValueError):
    """Raised when raw document content cannot be parsed into a Document."""


def schema_version_key(version: str) -> Tuple[int, ...]:
    """Comparable form of a dotted schema version ("2" == "2.0.0")."""
    parts = [int(p) for p in str(version).split(".")]
    while len(parts) < 3:
        parts.append(0)
    return tuple(parts)


def file_name_for(package_name: str) -> str:
    """Deterministic file name for a package's advisory document."""
    return f"{package_name}{FILE_SUFFIX}"


@dataclass(frozen=True)
class Package:
    name: str


@dataclass(frozen=True)
class Advisory:
    """The tracked history for one (package, vulnerability) pair."""
    id: str
    aliases: Tuple[str, ...] = ()
    events: Tuple[Event, ...] = ()

    def __post_init__(self):
        # Accept lists from callers, store tuples.
        object.__setattr__(self, "aliases", tuple(self.aliases))
        object.__setattr__(self, "events", tuple(self.events))

    def with_event(self, event: Event) -> "Advisory":
        """Return a copy with ``event`` appended to the history."""
        return replace(self, events=self.events + (event,))

    def identifiers(self) -> set:
        """The advisory ID together with all of its aliases."""
        return {self.id, *self.aliases}

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id}
        if self.aliases:
            out["aliases"] = list(self.aliases)
        out["events"] = [e.to_dict() for e in self.events]
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Advisory":
        if not isinstance(raw, dict):
            raise DocumentFormatError("advisory must be a mapping")

        advisory_id = raw.get("id")
        if not isinstance(advisory_id, str) or not advisory_id:
            raise DocumentFormatError("advisory is missing an id")

        aliases = raw.get("aliases") or []
        if not isinstance(aliases, list) or not all(isinstance(a, str) for a in aliases):
            raise DocumentFormatError(f"advisory {advisory_id}: aliases must be a list of strings")

        raw_events = raw.get("events") or []
        if not isinstance(raw_events, list):
            raise DocumentFormatError(f"advisory {advisory_id}: events must be a list")

        events = []
        for i, raw_event in enumerate(raw_events):
            try:
                events.append(Event.from_dict(raw_event))
            except EventValidationError as e:
                raise DocumentFormatError(f"advisory {advisory_id}: event {i}: {e}") from e

        return cls(id=advisory_id, aliases=tuple(aliases), events=tuple(events))


@dataclass(frozen=True)
class Document:
    """The persisted unit of storage: all advisories for one package."""
    package: Package
    advisories: Tuple[Advisory, ...] = ()
    schema_version: str = SCHEMA_VERSION

    def __post_init__(self):
        object.__setattr__(self, "advisories", tuple(self.advisories))

    @property
    def name(self) -> str:
        return self.package.name

    def get(self, advisory_id: str) -> Optional[Advisory]:
        """Look up an advisory by its ID."""
        for adv in self.advisories:
            if adv.id == advisory_id:
                return adv
        return None

    def find(self, vulnerability_id: str, aliases: Iterable[str] = ()) -> Optional[Advisory]:
        """
        Look up the advisory for a vulnerability known by an ID and aliases.

        An advisory whose own ID equals ``vulnerability_id`` wins, then one
        whose ID equals one of ``aliases``; only after that does any overlap
        between the identifiers and an advisory's aliases count.
        """
        aliases = list(aliases)
        for ident in [vulnerability_id, *aliases]:
            adv = self.get(ident)
            if adv is not None:
                return adv

        wanted = {vulnerability_id, *aliases}
        for adv in self.advisories:
            if adv.identifiers() & wanted:
                return adv
        return None

    def validate(self) -> List[str]:
        """
        Check the invariants every persisted document must satisfy.

        Returns:
            List of human-readable violations (empty when valid)
        """
        problems = []

        if not self.package.name:
            problems.append("package name is empty")

        seen = set()
        for adv in self.advisories:
            if adv.id in seen:
                problems.append(f"duplicate advisory id {adv.id}")
            seen.add(adv.id)

            if not adv.events:
                problems.append(f"advisory {adv.id} has no events")

            for prev, curr in zip(adv.events, adv.events[1:]):
                if curr.timestamp < prev.timestamp:
                    problems.append(
                        f"advisory {adv.id}: event at {curr.timestamp.isoformat()} "
                        f"precedes earlier event at {prev.timestamp.isoformat()}"
                    )
                    break

        ids = [adv.id for adv in self.advisories]
        if ids != sorted(ids):
            problems.append("advisories are not sorted by id")

        return problems

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema-version": self.schema_version,
            "package": {"name": self.package.name},
            "advisories": [a.to_dict() for a in self.advisories],
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "Document":
        if not isinstance(raw, dict):
            raise DocumentFormatError("document must be a mapping")

        version = raw.get("schema-version")
        if version is None:
            raise DocumentFormatError("document is missing schema-version")
        version = str(version)
        if version not in SUPPORTED_SCHEMA_VERSIONS:
            raise DocumentFormatError(
                f"unsupported schema-version {version} (supported up to {SCHEMA_VERSION})"
            )

        package = raw.get("package")
        if not isinstance(package, dict) or not isinstance(package.get("name"), str) or not package["name"]:
            raise DocumentFormatError("document is missing package.name")

        raw_advisories = raw.get("advisories") or []
        if not isinstance(raw_advisories, list):
            raise DocumentFormatError("advisories must be a list")

        return cls(
            package=Package(name=package["name"]),
            advisories=tuple(Advisory.from_dict(a) for a in raw_advisories),
            schema_version=version,
        )


def sort_advisories(advisories: Iterable[Advisory]) -> Tuple[Advisory, ...]:
    """Advisories ordered by ID, the order every write persists."""
    return tuple(sorted(advisories, key=lambda a: a.id))


def decode_document(content: bytes) -> Document:
    """
    Parse the YAML content of one document file.

    Raises:
        DocumentFormatError: If content is not valid YAML or fails schema checks
    """
    try:
        raw = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise DocumentFormatError(f"invalid YAML: {e}") from e
    return Document.from_dict(raw)


def encode_document(document: Document) -> bytes:
    """Serialize a document to YAML with stable key order."""
    return yaml.safe_dump(
        document.to_dict(),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    ).encode("utf-8")
