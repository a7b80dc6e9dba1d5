"""Card mutation operations for the appointment board.

Each operation checks everything first (version, lifecycle transition,
neighbour claim, rank) and only then writes to the working set, so a failed
call leaves the board exactly as it was.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone

from apptboard.errors import DuplicateCard, IllegalTransition, StatusMismatch, VersionConflict
from apptboard.lifecycle import Appointment, Status, attempt_transition, next_status
from apptboard.model.board import Board, Card, Mutation, find_appointment, find_card, placement
from apptboard.model.column import end_of_column, plan_rank, rank_updates
from apptboard.model.events import CardInserted, CardMoved, CardRemoved, CardReordered

logger = logging.getLogger(__name__)


def _check_version(card: Card, version: int) -> None:
    if card.version != version:
        raise VersionConflict(card.appointment_id, version, card.version)


def _commit(board: Board, card: Card, rebalanced: dict[str, Card]) -> dict[str, Card | None]:
    """Write card and any rebalanced neighbours; return their prior state."""
    previous = {card_id: board.cards.get(card_id) for card_id in rebalanced}
    previous[card.appointment_id] = board.cards.get(card.appointment_id)
    board.cards.update(rebalanced)
    board.cards[card.appointment_id] = card
    return previous


def insert_card(board: Board, appointment: Appointment, column: Status | None = None) -> Mutation:
    """Put a new card for appointment at the end of its column."""
    column = Status(column) if column is not None else appointment.status
    if column != appointment.status:
        raise StatusMismatch(
            f"appointment {appointment.id} is {appointment.status.value}, cannot place it in {column.value}"
        )
    if appointment.id in board.cards:
        raise DuplicateCard(f"card {appointment.id} is already on the board")

    last = end_of_column(board, column)
    rank, rebalanced = plan_rank(board, column, last.appointment_id if last else None, None)

    card = Card(appointment.id, column, rank)
    previous_appointment = board.appointments.get(appointment.id)
    previous = _commit(board, card, rebalanced)
    board.appointments[appointment.id] = appointment
    logger.debug("inserted %s into %s at %s", card.appointment_id, column.value, rank)

    return Mutation(
        placement=placement(card),
        events=[CardInserted(card.appointment_id, column, rank, card.version)],
        rank_updates=rank_updates(rebalanced),
        previous=previous,
        previous_appointment=previous_appointment,
    )


def reorder_card(
    board: Board,
    card_id: str,
    after_id: str | None = None,
    before_id: str | None = None,
    *,
    version: int,
) -> Mutation:
    """Move a card between after_id and before_id within its own column."""
    card = find_card(board, card_id)
    _check_version(card, version)

    rank, rebalanced = plan_rank(board, card.column, after_id, before_id, moving_id=card_id)
    moved = replace(card, rank=rank, version=card.version + 1)
    previous = _commit(board, moved, rebalanced)
    logger.debug("reordered %s in %s: %s → %s", card_id, card.column.value, card.rank, rank)

    return Mutation(
        placement=placement(moved),
        events=[CardReordered(card_id, card.column, card.rank, rank, moved.version)],
        rank_updates=rank_updates(rebalanced),
        previous=previous,
    )


def move_card(
    board: Board,
    card_id: str,
    column: Status,
    after_id: str | None = None,
    before_id: str | None = None,
    *,
    version: int,
    now: datetime | None = None,
    triggered_by: str = "system",
) -> Mutation:
    """Move a card to column between after_id and before_id.

    A change of column is a status change and must pass the lifecycle
    rules; moving within the same column is a plain reorder.
    """
    column = Status(column)
    card = find_card(board, card_id)
    _check_version(card, version)
    if column == card.column:
        return reorder_card(board, card_id, after_id, before_id, version=version)

    appointment = find_appointment(board, card_id)
    if appointment.status != card.column:
        raise StatusMismatch(
            f"appointment {card_id} is {appointment.status.value} but its card is in {card.column.value}"
        )
    record = attempt_transition(
        appointment,
        column,
        now or datetime.now(timezone.utc),
        board.policy,
        triggered_by,
    )

    rank, rebalanced = plan_rank(board, column, after_id, before_id, moving_id=card_id)
    moved = replace(card, column=column, rank=rank, version=card.version + 1)
    previous = _commit(board, moved, rebalanced)
    board.appointments[card_id] = replace(appointment, status=column)
    logger.debug("moved %s: %s → %s at %s", card_id, card.column.value, column.value, rank)

    return Mutation(
        placement=placement(moved),
        events=[CardMoved(card_id, card.column, column, rank, moved.version)],
        transition=record,
        rank_updates=rank_updates(rebalanced),
        previous=previous,
        previous_appointment=appointment,
    )


def advance_card(
    board: Board,
    card_id: str,
    *,
    version: int,
    now: datetime | None = None,
    triggered_by: str = "system",
) -> Mutation:
    """Move a card to the next status in the pipeline, at the end of that column."""
    card = find_card(board, card_id)
    target = next_status(card.column, board.policy)
    if target is None:
        raise IllegalTransition(card.column, card.column, f"{card.column.label} has no next status")
    last = end_of_column(board, target)
    return move_card(
        board,
        card_id,
        target,
        last.appointment_id if last else None,
        None,
        version=version,
        now=now,
        triggered_by=triggered_by,
    )


def remove_card(board: Board, card_id: str, *, version: int) -> Mutation:
    """Detach a card from the board. The appointment itself is left alone."""
    card = find_card(board, card_id)
    _check_version(card, version)
    del board.cards[card_id]
    logger.debug("removed %s from %s", card_id, card.column.value)
    return Mutation(
        placement=None,
        events=[CardRemoved(card_id, card.column, card.version)],
        previous={card_id: card},
    )


def restore_cards(
    board: Board,
    previous: dict[str, Card | None],
    expected: dict[str, int | None],
    appointment: Appointment | None = None,
) -> None:
    """Put cards back to a recorded pre-state.

    expected maps each card id to the version it should have now (None if
    it should be absent); any difference raises VersionConflict before
    anything is written.
    """
    for card_id, version in expected.items():
        current = board.cards.get(card_id)
        actual = current.version if current is not None else None
        if actual != version:
            raise VersionConflict(card_id, version or 0, actual or 0)

    for card_id, card in previous.items():
        if card is None:
            board.cards.pop(card_id, None)
        else:
            board.cards[card_id] = card
    if appointment is not None:
        board.appointments[appointment.id] = appointment
