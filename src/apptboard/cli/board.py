"""Handlers for 'apptboard board' commands."""

from apptboard.cli._common import (
    config_or_die,
    error,
    events_payload,
    format_event,
    load_board_or_die,
    output_json,
    output_result,
    parse_time,
    save,
)
from apptboard.errors import BoardError
from apptboard.lifecycle import Status
from apptboard.model.board import column_cards
from apptboard.model.card import move_card


def board_show(args) -> int:
    """Show cards grouped by column, in rank order."""
    config = config_or_die(args.config, args.json)
    board = load_board_or_die(args.board, config, args.json)

    columns = []
    for status in Status:
        cards = [{"id": c.appointment_id, "rank": c.rank, "version": c.version} for c in column_cards(board, status)]
        columns.append({"column": status.value, "cards": cards})

    if args.json:
        output_json(columns)
    else:
        for col in columns:
            print(f"{col['column']}  ({len(col['cards'])})")
            for c in col["cards"]:
                print(f"  {c['id']:<12} {c['rank']:<10} v{c['version']}")

    return 0


def board_move(args) -> int:
    """Move a card to a column between two neighbours and save the snapshot."""
    config = config_or_die(args.config, args.json)
    board = load_board_or_die(args.board, config, args.json)
    now = parse_time(args.at, args.json)
    try:
        column = Status(args.column)
    except ValueError:
        error(f"unknown column {args.column!r}", args.json)

    try:
        mutation = move_card(
            board,
            args.id,
            column,
            args.after,
            args.before,
            version=args.version,
            now=now,
            triggered_by=args.by,
        )
    except BoardError as e:
        error(str(e), args.json)

    save(board, args.board)

    transitions = [mutation.transition] if mutation.transition else []
    data = events_payload(mutation.events, transitions, mutation.rank_updates)
    text = "\n".join(format_event(e) for e in data["events"])
    output_result(data, text, args.json)
    return 0
