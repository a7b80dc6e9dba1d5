"""Shared fixtures: a fixed clock and a board builder."""

from datetime import datetime, timezone

import pytest

from apptboard.lifecycle import Appointment, Status
from apptboard.model.board import Board, Card
from apptboard.rank import spread_ranks

NOW = datetime(2026, 10, 18, 10, 0, tzinfo=timezone.utc)

# Facts under which every guard on the transition table passes.
READY = {
    "staff_assigned": True,
    "scheduled_time": NOW,
    "service_lines_closed": True,
    "payment_settled": True,
    "staff_available": True,
}


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_board():
    """Build a board from {column: [card_id or (card_id, rank), ...]}.

    Cards without an explicit rank get evenly spaced ones. facts maps a
    card id to Appointment fields overriding READY.
    """

    def build(layout=None, facts=None, **options):
        board = Board(**options)
        for column, entries in (layout or {}).items():
            column = Status(column)
            for entry, spread in zip(entries, spread_ranks(len(entries))):
                card_id, rank = (entry, spread) if isinstance(entry, str) else entry
                board.cards[card_id] = Card(card_id, column, rank)
                overrides = (facts or {}).get(card_id, {})
                board.appointments[card_id] = Appointment(card_id, column, **{**READY, **overrides})
        return board

    return build
