"""Tests for event serialisation."""

import json

from apptboard.lifecycle import Appointment, Status, attempt_transition
from apptboard.model.events import CardMoved, CardRemoved, ExternalSignal, event_to_dict

from ..conftest import NOW, READY


def test_card_moved_to_dict():
    event = CardMoved("a1", Status.BOOKED, Status.CHECKED_IN, "i", 2)
    assert event_to_dict(event) == {
        "kind": "card_moved",
        "card_id": "a1",
        "from_column": "booked",
        "to_column": "checked_in",
        "rank": "i",
        "version": 2,
    }


def test_signal_to_dict():
    assert event_to_dict(ExternalSignal("notify_client", "a1")) == {
        "kind": "signal",
        "name": "notify_client",
        "card_id": "a1",
    }


def test_transition_record_to_dict():
    record = attempt_transition(Appointment("a1", **READY), Status.CHECKED_IN, NOW, triggered_by="desk")
    data = event_to_dict(record)

    assert data["kind"] == "transition"
    assert data["from_status"] == "booked"
    assert data["to_status"] == "checked_in"
    assert data["timestamp"] == NOW.isoformat()
    assert data["guard_trace"] == [
        {"name": "staff_assigned", "passed": True},
        {"name": "check_in_window", "passed": True},
    ]


def test_event_dicts_are_json_ready():
    events = [
        CardRemoved("a1", Status.PAID, 4),
        attempt_transition(Appointment("a2", **READY), Status.CANCELLED, NOW),
    ]
    json.dumps([event_to_dict(e) for e in events])
