"""
Event fold: derive an advisory's current status from its history.

Status is never stored on the advisory. Both the security database export
and the scan filter fold the event history on every read, so the two can
never disagree about what "current" means.

Fold rules:
- Events are ordered by timestamp; ties keep their original order
- The last event in that order alone decides the status
- An advisory without events has no status (None), never a default
- Event kind -> status is a lookup in a StatusTable, so new kinds only
  need a new table entry
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional
import logging

from documents import Advisory, Event, EventType


logger = logging.getLogger(__name__)


class StateType(Enum):
    """State classification."""
    FINAL = "final"
    NON_FINAL = "non_final"


class UnmappedEventType(LookupError):
    """Raised when the status table has no entry for an event kind."""


@dataclass(frozen=True)
class Status:
    """Current status of an advisory, as of its latest event."""
    state: str  # fixed | false_positive | wont_fix | analysis_not_planned | pending_upstream | affected | under_investigation
    state_type: StateType
    event_type: EventType
    timestamp: datetime
    fixed_version: Optional[str] = None

    @property
    def is_final(self) -> bool:
        return self.state_type is StateType.FINAL


@dataclass(frozen=True)
class StatusRule:
    """How one event kind maps to a status."""
    state: str
    state_type: StateType
    fixed_version: Callable[[Event], Optional[str]] = lambda event: None


FIXED = "fixed"
FALSE_POSITIVE = "false_positive"
WONT_FIX = "wont_fix"
ANALYSIS_NOT_PLANNED = "analysis_not_planned"
PENDING_UPSTREAM = "pending_upstream"
AFFECTED = "affected"
UNDER_INVESTIGATION = "under_investigation"

DEFAULT_RULES: Dict[EventType, StatusRule] = {
    EventType.FIXED: StatusRule(FIXED, StateType.FINAL, lambda event: event.fixed_version),
    EventType.FALSE_POSITIVE_DETERMINATION: StatusRule(FALSE_POSITIVE, StateType.FINAL),
    EventType.FIX_NOT_PLANNED: StatusRule(WONT_FIX, StateType.FINAL),
    EventType.ANALYSIS_NOT_PLANNED: StatusRule(ANALYSIS_NOT_PLANNED, StateType.FINAL),
    EventType.PENDING_UPSTREAM_FIX: StatusRule(PENDING_UPSTREAM, StateType.NON_FINAL),
    EventType.TRUE_POSITIVE_DETERMINATION: StatusRule(AFFECTED, StateType.NON_FINAL),
    EventType.DETECTION: StatusRule(UNDER_INVESTIGATION, StateType.NON_FINAL),
}


class StatusTable:
    """
    Table-driven mapping from event kind to status.

    Args:
        rules: Custom rules by event kind. If None, uses DEFAULT_RULES.
    """

    def __init__(self, rules: Optional[Dict[EventType, StatusRule]] = None):
        self.rules = dict(DEFAULT_RULES if rules is None else rules)

    def status_for(self, event: Event) -> Status:
        rule = self.rules.get(event.type)
        if rule is None:
            raise UnmappedEventType(f"No status mapping for event type {event.type.value}")

        return Status(
            state=rule.state,
            state_type=rule.state_type,
            event_type=event.type,
            timestamp=event.timestamp,
            fixed_version=rule.fixed_version(event),
        )

    def states(self, state_type: Optional[StateType] = None) -> List[str]:
        """All states produced by this table, optionally of one type."""
        return sorted({
            r.state for r in self.rules.values()
            if state_type is None or r.state_type is state_type
        })


DEFAULT_STATUS_TABLE = StatusTable()


def sorted_events(advisory: Advisory) -> List[Event]:
    """Events ordered by timestamp; sorted() is stable, so ties keep insertion order."""
    return sorted(advisory.events, key=lambda e: e.timestamp)


def latest_event(advisory: Advisory) -> Optional[Event]:
    events = sorted_events(advisory)
    return events[-1] if events else None


def current_status(advisory: Advisory, table: StatusTable = DEFAULT_STATUS_TABLE) -> Optional[Status]:
    """
    Fold an advisory's history into its current status.

    Args:
        advisory: Advisory to fold
        table: Event kind -> status mapping

    Returns:
        Status of the latest event, or None if the advisory has no events
    """
    event = latest_event(advisory)
    if event is None:
        logger.debug(f"Advisory {advisory.id}: no events, no status")
        return None

    status = table.status_for(event)
    logger.debug(f"Advisory {advisory.id}: latest {event.type.value} -> {status.state}")
    return status


def status_history(advisory: Advisory, table: StatusTable = DEFAULT_STATUS_TABLE) -> List[Status]:
    """
    Status after each event, oldest first, for audit trails.

    The last element always equals current_status(advisory).
    """
    return [table.status_for(e) for e in sorted_events(advisory)]
