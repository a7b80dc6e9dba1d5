"""CLI argument parser and dispatch for apptboard."""

import argparse

from apptboard.cli.board import board_move, board_show
from apptboard.cli.lifecycle import lifecycle_targets
from apptboard.cli.playbook import playbook_list, playbook_run
from apptboard.cli.rank import rank_after_cmd, rank_between_cmd, rank_spread_cmd
from apptboard.rank import DEFAULT_STEP


def build_parser() -> argparse.ArgumentParser:
    """Build the full CLI argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    common.add_argument("-v", "--verbose", action="store_true", help="Log board operations to stderr")

    configured = argparse.ArgumentParser(add_help=False)
    configured.add_argument("--config", help="YAML config file (default: built-in settings)")

    snapshot = argparse.ArgumentParser(add_help=False)
    snapshot.add_argument("--board", required=True, help="YAML board snapshot file")

    mutating = argparse.ArgumentParser(add_help=False)
    mutating.add_argument("--at", help="Time of the change, ISO 8601 (default: now)")
    mutating.add_argument("--by", default="cli", help="Who triggered the change (default: cli)")

    parser = argparse.ArgumentParser(
        prog="apptboard",
        description="Appointment board: ranked cards, lifecycle rules and playbooks",
        parents=[common],
    )

    nouns = parser.add_subparsers(dest="noun")

    # --- rank ---
    rank_p = nouns.add_parser("rank", help="Rank key calculations", parents=[common])
    rank_verbs = rank_p.add_subparsers(dest="verb")

    between_p = rank_verbs.add_parser("between", help="Rank strictly between two ranks", parents=[common])
    between_p.add_argument("low", nargs="?", default="", help="Lower rank (omit or '' for column start)")
    between_p.add_argument("high", nargs="?", default="", help="Upper rank (omit or '' for column end)")
    between_p.set_defaults(func=rank_between_cmd)

    after_p = rank_verbs.add_parser("after", help="Append rank after a rank", parents=[common])
    after_p.add_argument("rank", help="Current last rank")
    after_p.add_argument("--step", type=int, default=DEFAULT_STEP, help=f"Step size (default: {DEFAULT_STEP})")
    after_p.set_defaults(func=rank_after_cmd)

    spread_p = rank_verbs.add_parser("spread", help="Evenly spaced ranks for a rebalance", parents=[common])
    spread_p.add_argument("count", type=int, help="Number of ranks")
    spread_p.set_defaults(func=rank_spread_cmd)

    # --- lifecycle ---
    life_p = nouns.add_parser("lifecycle", help="Appointment lifecycle rules", parents=[common])
    life_verbs = life_p.add_subparsers(dest="verb")

    targets_p = life_verbs.add_parser(
        "targets", help="Statuses reachable from a status", parents=[common, configured]
    )
    targets_p.add_argument("status", help="Current status")
    targets_p.set_defaults(func=lifecycle_targets)

    # --- board ---
    board_p = nouns.add_parser("board", help="Board snapshot operations", parents=[common])
    board_verbs = board_p.add_subparsers(dest="verb")

    show_p = board_verbs.add_parser("show", help="Show cards by column", parents=[common, configured, snapshot])
    show_p.set_defaults(func=board_show)

    move_p = board_verbs.add_parser(
        "move", help="Move a card", parents=[common, configured, snapshot, mutating]
    )
    move_p.add_argument("id", help="Card (appointment) ID")
    move_p.add_argument("column", help="Target column (status)")
    move_p.add_argument("--version", type=int, required=True, help="Card version last seen")
    move_p.add_argument("--after", help="Card the moved card goes after")
    move_p.add_argument("--before", help="Card the moved card goes before")
    move_p.set_defaults(func=board_move)

    # --- playbook ---
    pb_p = nouns.add_parser("playbook", help="Playbook operations", parents=[common])
    pb_verbs = pb_p.add_subparsers(dest="verb")

    pb_list_p = pb_verbs.add_parser("list", help="List playbooks", parents=[common, configured])
    pb_list_p.set_defaults(func=playbook_list)

    pb_run_p = pb_verbs.add_parser(
        "run", help="Apply a playbook to a card", parents=[common, configured, snapshot, mutating]
    )
    pb_run_p.add_argument("name", help="Playbook name")
    pb_run_p.add_argument("id", help="Card (appointment) ID")
    pb_run_p.add_argument("--version", type=int, help="Card version last seen")
    pb_run_p.set_defaults(func=playbook_run)

    # playbook with no verb = list
    pb_p.set_defaults(func=playbook_list, config=None)

    return parser
