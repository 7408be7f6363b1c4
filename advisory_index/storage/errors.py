"""
Errors raised by the document store and index.

All of them derive from StoreError so callers can handle store-shape
problems in one place while still telling them apart.
"""
from typing import List, Optional, Tuple


class StoreError(Exception):
    """Base class for document store and index errors."""


class MalformedDocument(StoreError):
    """
    A document file failed to parse or validate at load time.

    Attributes:
        file_name: The first offending file
        failures: Every (file_name, reason) pair found during the load
    """

    def __init__(self, file_name: str, reason: str, failures: Optional[List[Tuple[str, str]]] = None):
        self.file_name = file_name
        self.reason = reason
        self.failures = failures or [(file_name, reason)]
        message = f"malformed advisory document {file_name}: {reason}"
        if len(self.failures) > 1:
            message += f" (and {len(self.failures) - 1} more malformed documents)"
        super().__init__(message)


class AlreadyExists(StoreError):
    """A document is already addressable by the given file or package name."""


class NotFound(StoreError):
    """No document matched where exactly one was expected."""


class Conflict(StoreError):
    """A transformed document violates the store's invariants."""

    def __init__(self, file_name: str, problems: List[str]):
        self.file_name = file_name
        self.problems = problems
        super().__init__(f"invalid document {file_name}: {'; '.join(problems)}")
