"""
Advisory events and their type-specific payloads.

Each event records one determination about a (package, vulnerability)
pair. The event's ``type`` tag decides the shape of its ``data`` payload;
the pairing is checked once, when an Event is constructed, so code that
reads events never has to guess what a payload looks like.

YAML shape of one event:

    - timestamp: 2024-01-15T12:00:00Z
      type: fixed
      data:
        fixed-version: 8.4.0
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union


class EventType(Enum):
    """Closed set of event kinds understood by this version of the schema."""
    DETECTION = "detection"
    TRUE_POSITIVE_DETERMINATION = "true-positive-determination"
    FIXED = "fixed"
    FALSE_POSITIVE_DETERMINATION = "false-positive-determination"
    ANALYSIS_NOT_PLANNED = "analysis-not-planned"
    FIX_NOT_PLANNED = "fix-not-planned"
    PENDING_UPSTREAM_FIX = "pending-upstream-fix"


class EventValidationError(ValueError):
    """Raised when an event's tag and payload do not agree."""


DETECTION_TYPES = {"manual", "nvdapi"}

FALSE_POSITIVE_TYPES = {
    "vulnerability-record-analysis-contested",
    "component-vulnerability-mismatch",
    "vulnerable-code-version-not-used",
    "vulnerable-code-not-included-in-package",
    "vulnerable-code-not-in-execution-path",
    "vulnerable-code-cannot-be-controlled-by-adversary",
    "inline-mitigations-exist",
}


@dataclass(frozen=True)
class Detection:
    type: str = "manual"

    def validate(self):
        if self.type not in DETECTION_TYPES:
            raise EventValidationError(f"unknown detection type: {self.type!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Detection":
        return cls(type=raw.get("type", "manual"))


@dataclass(frozen=True)
class Fixed:
    """A fix for the vulnerability shipped in ``fixed_version``."""
    fixed_version: str

    def validate(self):
        if not isinstance(self.fixed_version, str) or not self.fixed_version.strip():
            raise EventValidationError("fixed event requires a non-empty fixed-version")

    def to_dict(self) -> Dict[str, Any]:
        return {"fixed-version": self.fixed_version}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Fixed":
        version = raw.get("fixed-version")
        if version is not None and not isinstance(version, str):
            # An unquoted 1.10 arrives as the float 1.1; the original text is gone.
            raise EventValidationError(
                f"fixed-version must be a string (quote it), got {type(version).__name__} {version!r}"
            )
        return cls(fixed_version=version)


@dataclass(frozen=True)
class FalsePositiveDetermination:
    """The match was determined not to be a real vulnerability for this package."""
    type: Optional[str] = None
    note: str = ""

    def validate(self):
        if self.type is not None and self.type not in FALSE_POSITIVE_TYPES:
            raise EventValidationError(f"unknown false positive type: {self.type!r}")

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.type:
            out["type"] = self.type
        if self.note:
            out["note"] = self.note
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "FalsePositiveDetermination":
        return cls(type=raw.get("type"), note=raw.get("note", "") or "")


@dataclass(frozen=True)
class Note:
    """Free-text payload shared by the determination kinds that only carry a note."""
    note: str = ""

    def validate(self):
        if not isinstance(self.note, str):
            raise EventValidationError("note must be a string")

    def to_dict(self) -> Dict[str, Any]:
        return {"note": self.note} if self.note else {}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Note":
        return cls(note=raw.get("note", "") or "")


EventData = Union[Detection, Fixed, FalsePositiveDetermination, Note]

# type tag -> (payload class, payload required)
EVENT_DATA_TYPES = {
    EventType.DETECTION: (Detection, False),
    EventType.TRUE_POSITIVE_DETERMINATION: (Note, False),
    EventType.FIXED: (Fixed, True),
    EventType.FALSE_POSITIVE_DETERMINATION: (FalsePositiveDetermination, False),
    EventType.ANALYSIS_NOT_PLANNED: (Note, False),
    EventType.FIX_NOT_PLANNED: (Note, False),
    EventType.PENDING_UPSTREAM_FIX: (Note, False),
}


def format_timestamp(ts: datetime) -> str:
    """Render a timestamp as RFC 3339 in UTC with a ``Z`` suffix."""
    return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a timestamp from YAML.

    PyYAML already turns unquoted timestamps into datetime objects, quoted
    ones arrive as strings. Naive values are taken to be UTC.
    """
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str):
        try:
            ts = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise EventValidationError(f"invalid timestamp {value!r}: {e}") from e
    else:
        raise EventValidationError(f"invalid timestamp {value!r}")

    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


@dataclass(frozen=True)
class Event:
    """One state transition in an advisory's history."""
    timestamp: datetime
    type: EventType
    data: Optional[EventData] = None

    def __post_init__(self):
        if not isinstance(self.timestamp, datetime):
            raise EventValidationError("event timestamp must be a datetime")
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc))
        if not isinstance(self.type, EventType):
            raise EventValidationError(f"unknown event type: {self.type!r}")

        data_cls, required = EVENT_DATA_TYPES[self.type]
        if self.data is None:
            if required:
                raise EventValidationError(f"{self.type.value} event requires data")
            return
        if not isinstance(self.data, data_cls):
            raise EventValidationError(
                f"{self.type.value} event cannot carry {type(self.data).__name__} data"
            )
        self.data.validate()

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "timestamp": format_timestamp(self.timestamp),
            "type": self.type.value,
        }
        if self.data is not None:
            payload = self.data.to_dict()
            if payload:
                out["data"] = payload
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Event":
        if not isinstance(raw, dict):
            raise EventValidationError(f"event must be a mapping, got {type(raw).__name__}")

        type_tag = raw.get("type")
        try:
            event_type = EventType(type_tag)
        except ValueError:
            raise EventValidationError(f"unknown event type: {type_tag!r}") from None

        if "timestamp" not in raw:
            raise EventValidationError("event is missing a timestamp")
        timestamp = parse_timestamp(raw["timestamp"])

        data = None
        raw_data = raw.get("data")
        if raw_data is not None:
            if not isinstance(raw_data, dict):
                raise EventValidationError(f"{type_tag} event data must be a mapping")
            data_cls, _ = EVENT_DATA_TYPES[event_type]
            data = data_cls.from_dict(raw_data)

        return cls(timestamp=timestamp, type=event_type, data=data)

    @property
    def fixed_version(self) -> Optional[str]:
        if isinstance(self.data, Fixed):
            return self.data.fixed_version
        return None
