"""
Tests for the event fold.

Validates that the latest event alone decides an advisory's status,
that ties keep insertion order, and that the mapping is table-driven.
"""
import pytest

from decisioning import (
    StateType,
    StatusRule,
    StatusTable,
    UnmappedEventType,
    current_status,
    latest_event,
    status_history,
)
from decisioning.status import AFFECTED, FALSE_POSITIVE, FIXED, PENDING_UPSTREAM, UNDER_INVESTIGATION
from documents import Advisory, Detection, Event, EventType, Note
from conftest import at, false_positive_event, fixed_event


def event(kind: EventType, minutes: int = 0, data=None) -> Event:
    return Event(timestamp=at(minutes), type=kind, data=data)


class TestCurrentStatus:
    """Test folding a history into a single status."""

    def test_no_events_no_status(self):
        assert current_status(Advisory(id="CVE-2024-0001")) is None
        assert latest_event(Advisory(id="CVE-2024-0001")) is None

    def test_fixed(self):
        status = current_status(Advisory(id="CVE-2024-0001", events=(fixed_event("8.4.0"),)))

        assert status.state == FIXED
        assert status.fixed_version == "8.4.0"
        assert status.is_final

    def test_latest_event_wins(self):
        adv = Advisory(id="CVE-2024-0001", events=(
            event(EventType.DETECTION, 0, Detection()),
            fixed_event("8.4.0", minutes=5),
            false_positive_event(minutes=10),
        ))

        status = current_status(adv)

        assert status.state == FALSE_POSITIVE
        assert status.fixed_version is None
        assert status.timestamp == at(10)

    def test_order_is_by_timestamp_not_position(self):
        """Events out of position still fold by time."""
        adv = Advisory(id="CVE-2024-0001", events=(
            fixed_event("8.4.0", minutes=10),
            event(EventType.DETECTION, 0, Detection()),
        ))
        assert current_status(adv).state == FIXED

    def test_ties_keep_insertion_order(self):
        adv = Advisory(id="CVE-2024-0001", events=(
            event(EventType.PENDING_UPSTREAM_FIX, 5),
            event(EventType.TRUE_POSITIVE_DETERMINATION, 5, Note("confirmed")),
        ))
        assert current_status(adv).state == AFFECTED

        swapped = Advisory(id="CVE-2024-0001", events=tuple(reversed(adv.events)))
        assert current_status(swapped).state == PENDING_UPSTREAM

    def test_reopened_after_fix(self):
        adv = Advisory(id="CVE-2024-0001", events=(
            fixed_event("8.4.0", minutes=0),
            event(EventType.DETECTION, 30, Detection("nvdapi")),
        ))

        status = current_status(adv)

        assert status.state == UNDER_INVESTIGATION
        assert status.state_type is StateType.NON_FINAL

    def test_fold_is_repeatable(self):
        adv = Advisory(id="CVE-2024-0001", events=(fixed_event("1.0"), false_positive_event(minutes=1)))
        assert current_status(adv) == current_status(adv)


class TestStatusTable:
    """Test the table-driven mapping."""

    def test_every_event_type_mapped_by_default(self):
        table = StatusTable()
        for kind in EventType:
            assert kind in table.rules

    def test_custom_table(self):
        table = StatusTable({
            EventType.FIXED: StatusRule("resolved", StateType.FINAL, lambda e: e.fixed_version),
        })
        adv = Advisory(id="CVE-2024-0001", events=(fixed_event("2.0"),))

        status = current_status(adv, table)

        assert status.state == "resolved"
        assert status.fixed_version == "2.0"

    def test_unmapped_event_type(self):
        table = StatusTable({EventType.FIXED: StatusRule(FIXED, StateType.FINAL)})
        adv = Advisory(id="CVE-2024-0001", events=(false_positive_event(),))

        with pytest.raises(UnmappedEventType):
            current_status(adv, table)

    def test_states_by_type(self):
        final = StatusTable().states(StateType.FINAL)
        assert FIXED in final
        assert FALSE_POSITIVE in final
        assert AFFECTED not in final


class TestStatusHistory:

    def test_history_ends_at_current(self):
        adv = Advisory(id="CVE-2024-0001", events=(
            event(EventType.DETECTION, 0, Detection()),
            event(EventType.TRUE_POSITIVE_DETERMINATION, 1),
            fixed_event("8.4.0", minutes=2),
        ))

        history = status_history(adv)

        assert [s.state for s in history] == [UNDER_INVESTIGATION, AFFECTED, FIXED]
        assert history[-1] == current_status(adv)
