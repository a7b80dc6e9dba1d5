"""Column-level operations: neighbour checks, rank planning and rebalancing."""

import logging
from dataclasses import replace

from apptboard.errors import StaleNeighbor
from apptboard.lifecycle import Status
from apptboard.model.board import Board, Card, RankUpdate, column_cards
from apptboard.rank import INITIAL_RANK, RankError, needs_rebalance, rank_after, rank_before, rank_between, spread_ranks

logger = logging.getLogger(__name__)


def start_of_column(board: Board, column: Status) -> Card | None:
    """First card in column, or None if empty."""
    cards = column_cards(board, column)
    return cards[0] if cards else None


def end_of_column(board: Board, column: Status) -> Card | None:
    """Last card in column, or None if empty."""
    cards = column_cards(board, column)
    return cards[-1] if cards else None


def rank_collisions(board: Board, column: Status) -> list[str]:
    """Ranks held by more than one card in column."""
    seen: set[str] = set()
    dupes: list[str] = []
    for card in column_cards(board, column):
        if card.rank in seen and card.rank not in dupes:
            dupes.append(card.rank)
        seen.add(card.rank)
    return dupes


def check_neighbors(
    board: Board,
    column: Status,
    after_id: str | None,
    before_id: str | None,
    moving_id: str | None = None,
) -> tuple[Card | None, Card | None]:
    """Confirm after_id is immediately followed by before_id in column.

    None for after_id means the start of the column, None for before_id its
    end. The moving card itself is ignored. Returns the neighbour cards;
    raises StaleNeighbor if the claim no longer holds.
    """
    cards = [card for card in column_cards(board, column) if card.appointment_id != moving_id]
    ids = [card.appointment_id for card in cards]

    if after_id is None:
        index = -1
    elif after_id in ids:
        index = ids.index(after_id)
    else:
        raise StaleNeighbor(f"{after_id} is not in {column.value}")

    expected = ids[index + 1] if index + 1 < len(ids) else None
    if before_id != expected:
        where = f"after {after_id}" if after_id else "at the start"
        found = expected or "the column end"
        raise StaleNeighbor(f"{where} of {column.value} is {found}, not {before_id or 'the column end'}")

    low = cards[index] if index >= 0 else None
    high = cards[index + 1] if index + 1 < len(cards) else None
    return low, high


def _rank_for(board: Board, low: Card | None, high: Card | None) -> str:
    if low is None and high is None:
        return INITIAL_RANK
    if high is None:
        return rank_after(low.rank, board.rank_step)
    if low is None:
        return rank_before(high.rank, board.rank_step)
    return rank_between(low.rank, high.rank)


def plan_rebalance(board: Board, column: Status, exclude: str | None = None) -> dict[str, Card]:
    """Rewritten copies of every card in column with evenly spaced ranks.

    Nothing is applied; the caller commits the returned cards.
    """
    cards = [card for card in column_cards(board, column) if card.appointment_id != exclude]
    ranks = spread_ranks(len(cards))
    return {
        card.appointment_id: replace(card, rank=rank, version=card.version + 1)
        for card, rank in zip(cards, ranks)
    }


def plan_rank(
    board: Board,
    column: Status,
    after_id: str | None,
    before_id: str | None,
    moving_id: str | None = None,
) -> tuple[str, dict[str, Card]]:
    """Rank for a card placed between the claimed neighbours.

    Returns (rank, rebalanced) where rebalanced holds rewritten neighbours
    when the column had to be rebalanced first: neighbour ranks that are
    equal or malformed, or a result longer than the board allows.
    """
    low, high = check_neighbors(board, column, after_id, before_id, moving_id)
    try:
        rank = _rank_for(board, low, high)
    except RankError as exc:
        logger.info("rebalancing %s: %s", column.value, exc)
    else:
        if not needs_rebalance(rank, board.max_rank_length):
            return rank, {}
        logger.info("rebalancing %s: rank %s exceeds %d characters", column.value, rank, board.max_rank_length)

    rebalanced = plan_rebalance(board, column, exclude=moving_id)
    low = rebalanced[low.appointment_id] if low else None
    high = rebalanced[high.appointment_id] if high else None
    return _rank_for(board, low, high), rebalanced


def rebalance_column(board: Board, column: Status) -> list[RankUpdate]:
    """Spread the ranks of column evenly and return the batch of updates.

    The caller must apply the batch with exclusive access to the column, or
    re-check each card's version when applying it piecemeal.
    """
    rebalanced = plan_rebalance(board, column)
    board.cards.update(rebalanced)
    logger.info("rebalanced %s: %d cards", column.value, len(rebalanced))
    return rank_updates(rebalanced)


def rank_updates(cards: dict[str, Card]) -> list[RankUpdate]:
    """Rebalance batch for cards, in column order."""
    ordered = sorted(cards.values(), key=lambda card: card.rank)
    return [RankUpdate(card.appointment_id, card.rank, card.version) for card in ordered]
