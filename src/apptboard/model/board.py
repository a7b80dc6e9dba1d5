"""Board working set: cards, the appointment snapshots behind them, and queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from apptboard.errors import StatusMismatch, UnknownCard
from apptboard.lifecycle import DEFAULT_POLICY, Appointment, LifecyclePolicy, Status, TransitionRecord
from apptboard.rank import DEFAULT_MAX_LENGTH, DEFAULT_STEP


@dataclass(frozen=True)
class Card:
    """One appointment's presence on the board. The card id is the appointment id."""

    appointment_id: str
    column: Status
    rank: str
    version: int = 1

    @property
    def id(self) -> str:
        return self.appointment_id


@dataclass(frozen=True)
class CardPlacement:
    """Where a card sits after a mutation, for the caller to persist."""

    card_id: str
    column: Status
    rank: str
    version: int


@dataclass(frozen=True)
class RankUpdate:
    """One entry of a rebalance batch."""

    card_id: str
    rank: str
    version: int


@dataclass
class Board:
    """In-memory working set needed to validate the next operation.

    Durable state lives with the caller; this only mirrors what was last
    loaded plus whatever mutations were applied since.
    """

    cards: dict[str, Card] = field(default_factory=dict)
    appointments: dict[str, Appointment] = field(default_factory=dict)
    policy: LifecyclePolicy = DEFAULT_POLICY
    rank_step: int = DEFAULT_STEP
    max_rank_length: int = DEFAULT_MAX_LENGTH


@dataclass
class Mutation:
    """Result of one board operation.

    ``previous`` holds the pre-state of every card the operation touched
    (None for a card it created) so the operation can be undone.
    """

    placement: CardPlacement | None
    events: list[Any] = field(default_factory=list)
    transition: TransitionRecord | None = None
    rank_updates: list[RankUpdate] = field(default_factory=list)
    previous: dict[str, Card | None] = field(default_factory=dict)
    previous_appointment: Appointment | None = None


def find_card(board: Board, card_id: str) -> Card:
    """Look up a card by id. Raises UnknownCard."""
    card = board.cards.get(card_id)
    if card is None:
        raise UnknownCard(card_id)
    return card


def find_appointment(board: Board, card_id: str) -> Appointment:
    """Look up the appointment snapshot behind a card. Raises UnknownCard."""
    appointment = board.appointments.get(card_id)
    if appointment is None:
        raise UnknownCard(card_id)
    return appointment


def column_cards(board: Board, column: Status) -> list[Card]:
    """Cards in column, in board order.

    Ties on rank are broken by card id, so transiently equal ranks still
    give a total, stable order.
    """
    cards = [card for card in board.cards.values() if card.column == column]
    return sorted(cards, key=lambda card: (card.rank, card.appointment_id))


def placement(card: Card) -> CardPlacement:
    return CardPlacement(card.appointment_id, card.column, card.rank, card.version)


def set_appointment(board: Board, appointment: Appointment) -> None:
    """Refresh the snapshot of an appointment with newer facts.

    The status must still agree with the card's column, if it has one.
    """
    card = board.cards.get(appointment.id)
    if card is not None and card.column != appointment.status:
        raise StatusMismatch(
            f"appointment {appointment.id} is {appointment.status.value} "
            f"but its card is in {card.column.value}"
        )
    board.appointments[appointment.id] = appointment
