"""
Advisory requests: the input to create and update.

A request names a package and a vulnerability and carries the event to
record. It is normally assembled by an interactive prompt or from
command-line flags; either way it is validated here before any document
is touched.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from documents import Event, is_vulnerability_id
from .errors import InvalidRequest


@dataclass(frozen=True)
class Request:
    package: str
    vulnerability_id: str
    event: Optional[Event] = None
    aliases: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "aliases", tuple(self.aliases or ()))

    def problems(self) -> List[str]:
        """Every missing or invalid field, in field order."""
        problems = []

        if not self.package or not str(self.package).strip():
            problems.append("package: required")
        elif "/" in self.package or self.package in (".", ".."):
            problems.append(f"package: invalid name {self.package!r}")

        if not self.vulnerability_id:
            problems.append("vulnerability_id: required")
        elif not is_vulnerability_id(self.vulnerability_id):
            problems.append(f"vulnerability_id: invalid identifier {self.vulnerability_id!r}")

        for alias in self.aliases:
            if not is_vulnerability_id(alias):
                problems.append(f"aliases: invalid identifier {alias!r}")
            elif alias == self.vulnerability_id:
                problems.append(f"aliases: {alias!r} repeats the vulnerability ID")

        if self.event is None:
            problems.append("event: required")
        elif not isinstance(self.event, Event):
            problems.append(f"event: expected Event, got {type(self.event).__name__}")

        return problems

    def validate(self):
        """
        Raises:
            InvalidRequest: Listing every missing or invalid field
        """
        problems = self.problems()
        if problems:
            raise InvalidRequest(problems)
