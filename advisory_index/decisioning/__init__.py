"""
Advisory decisioning layer.

Derives deterministic, point-in-time status for advisories by folding
their event history through a table-driven status mapping.
"""
from .status import (
    DEFAULT_STATUS_TABLE,
    Status,
    StatusRule,
    StatusTable,
    StateType,
    UnmappedEventType,
    current_status,
    latest_event,
    sorted_events,
    status_history,
)


__all__ = [
    'DEFAULT_STATUS_TABLE',
    'Status',
    'StatusRule',
    'StatusTable',
    'StateType',
    'UnmappedEventType',
    'current_status',
    'latest_event',
    'sorted_events',
    'status_history',
]
