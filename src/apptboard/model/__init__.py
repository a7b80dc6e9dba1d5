"""Board model: cards ranked within status columns."""

from apptboard.model.board import (
    Board,
    Card,
    CardPlacement,
    Mutation,
    RankUpdate,
    column_cards,
    find_appointment,
    find_card,
    placement,
    set_appointment,
)
from apptboard.model.card import advance_card, insert_card, move_card, remove_card, reorder_card, restore_cards
from apptboard.model.column import (
    check_neighbors,
    end_of_column,
    rank_collisions,
    rebalance_column,
    start_of_column,
)
from apptboard.model.events import CardInserted, CardMoved, CardRemoved, CardReordered, ExternalSignal, event_to_dict
from apptboard.model.loader import load_board, parse_board
from apptboard.model.writer import board_to_dict, save_board

__all__ = [
    "Board",
    "Card",
    "CardInserted",
    "CardMoved",
    "CardPlacement",
    "CardRemoved",
    "CardReordered",
    "ExternalSignal",
    "Mutation",
    "RankUpdate",
    "advance_card",
    "board_to_dict",
    "check_neighbors",
    "column_cards",
    "end_of_column",
    "event_to_dict",
    "find_appointment",
    "find_card",
    "insert_card",
    "load_board",
    "move_card",
    "parse_board",
    "placement",
    "rank_collisions",
    "rebalance_column",
    "remove_card",
    "reorder_card",
    "restore_cards",
    "save_board",
    "set_appointment",
    "start_of_column",
]
