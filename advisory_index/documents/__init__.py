"""
Advisory document model.

Provides the schema for one package's advisory file:
- Document: package identity plus its advisories
- Advisory: one tracked vulnerability with its event history
- Event: one determination, tagged with an EventType and typed payload
"""
from .events import (
    Detection,
    Event,
    EventType,
    EventValidationError,
    FalsePositiveDetermination,
    Fixed,
    Note,
)
from .identifiers import is_vulnerability_id
from .document import (
    FILE_SUFFIX,
    SCHEMA_VERSION,
    Advisory,
    Document,
    DocumentFormatError,
    Package,
    decode_document,
    encode_document,
    file_name_for,
    schema_version_key,
    sort_advisories,
)

__all__ = [
    "Advisory",
    "Detection",
    "Document",
    "DocumentFormatError",
    "Event",
    "EventType",
    "EventValidationError",
    "FalsePositiveDetermination",
    "FILE_SUFFIX",
    "Fixed",
    "Note",
    "Package",
    "SCHEMA_VERSION",
    "decode_document",
    "encode_document",
    "file_name_for",
    "is_vulnerability_id",
    "schema_version_key",
    "sort_advisories",
]
