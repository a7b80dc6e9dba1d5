"""Handlers for 'apptboard playbook' commands."""

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
from apptboard.errors import BoardError, CompensationFailure, PlaybookFailure
from apptboard.playbook import PlaybookContext, run_playbook


def playbook_list(args) -> int:
    """List registered playbooks and their steps."""
    config = config_or_die(args.config, args.json)

    items = [
        {
            "name": p.name,
            "description": p.description,
            "steps": [s.describe() for s in p.steps],
        }
        for p in sorted(config.playbooks.values(), key=lambda p: p.name)
    ]

    if args.json:
        output_json(items)
    else:
        for p in items:
            print(f"{p['name']:<22} {p['description']}")
            for i, step in enumerate(p["steps"], start=1):
                print(f"  {i}. {step}")

    return 0


def playbook_run(args) -> int:
    """Apply a playbook to one card and save the snapshot on success."""
    config = config_or_die(args.config, args.json)
    board = load_board_or_die(args.board, config, args.json)
    context = PlaybookContext(
        card_id=args.id,
        now=parse_time(args.at, args.json),
        triggered_by=args.by,
        version=args.version,
    )

    try:
        result = run_playbook(board, config.playbooks, args.name, context)
    except CompensationFailure as e:
        error(f"board left inconsistent, reconcile by hand: {e}", args.json)
    except PlaybookFailure as e:
        error(f"{e} (undid steps {e.compensations or 'none'})", args.json)
    except BoardError as e:
        error(str(e), args.json)

    save(board, args.board)

    data = events_payload(result.events, result.transition_records, result.rank_updates)
    data["correlation_id"] = result.correlation_id
    lines = [f"{result.playbook} [{result.correlation_id}]"]
    lines += [f"  {format_event(e)}" for e in data["events"]]
    output_result(data, "\n".join(lines), args.json)
    return 0
