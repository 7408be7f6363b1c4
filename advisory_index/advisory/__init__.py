"""
Advisory operations.

Mutation entry points layered on the document index, and the security
database export built on the event fold:
- create: record a new advisory (new document if needed)
- update: append an event to an existing advisory
- build_security_database: export the secfixes feed
"""
from .create import create
from .errors import (
    AdvisoryError,
    AdvisoryNotFound,
    AmbiguousPackage,
    DuplicateAdvisory,
    InvalidRequest,
    NoSecurityData,
)
from .request import Request, is_vulnerability_id
from .secdb import NAK, BuildSecurityDatabaseOptions, build_security_database
from .update import update

__all__ = [
    "AdvisoryError",
    "AdvisoryNotFound",
    "AmbiguousPackage",
    "BuildSecurityDatabaseOptions",
    "DuplicateAdvisory",
    "InvalidRequest",
    "NAK",
    "NoSecurityData",
    "Request",
    "build_security_database",
    "create",
    "is_vulnerability_id",
    "update",
]
