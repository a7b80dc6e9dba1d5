"""Shared helpers for CLI command handlers."""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path

from apptboard.config import Config, load_config
from apptboard.errors import ConfigError, SnapshotError
from apptboard.model.board import Board
from apptboard.model.events import event_to_dict
from apptboard.model.loader import load_board
from apptboard.model.writer import save_board


def config_or_die(path: str | None, json_mode: bool) -> Config:
    """Load config from path (defaults if None). Exit 1 with message on error."""
    try:
        return load_config(path)
    except ConfigError as e:
        error(str(e), json_mode)


def load_board_or_die(path: str, config: Config, json_mode: bool) -> Board:
    """Load a board snapshot. Exit 1 with message if unreadable."""
    try:
        return load_board(Path(path).resolve(), **config.board_options())
    except SnapshotError as e:
        error(str(e), json_mode)


def save(board: Board, path: str) -> None:
    save_board(board, Path(path).resolve())


def parse_time(value: str | None, json_mode: bool) -> datetime:
    """Parse --at, defaulting to now (UTC). Naive times are taken as UTC."""
    if value is None:
        return datetime.now(timezone.utc)
    try:
        when = datetime.fromisoformat(value)
    except ValueError:
        error(f"bad time {value!r}; use ISO 8601, e.g. 2026-10-18T10:00:00+00:00", json_mode)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when


def events_payload(events: list, transitions: list, rank_updates: list) -> dict:
    """JSON-ready summary of what a mutation emitted."""
    return {
        "events": [event_to_dict(e) for e in events],
        "transitions": [event_to_dict(t) for t in transitions],
        "rank_updates": [{"card_id": u.card_id, "rank": u.rank, "version": u.version} for u in rank_updates],
    }


def format_event(data: dict) -> str:
    """One-line text rendering of an event dict."""
    kind = data["kind"]
    if kind == "card_moved":
        return f"moved {data['card_id']}: {data['from_column']} → {data['to_column']} at {data['rank']} (v{data['version']})"
    if kind == "card_reordered":
        return f"reordered {data['card_id']} in {data['column']}: {data['from_rank']} → {data['rank']} (v{data['version']})"
    if kind == "card_inserted":
        return f"inserted {data['card_id']} into {data['column']} at {data['rank']}"
    if kind == "card_removed":
        return f"removed {data['card_id']} from {data['column']}"
    if kind == "signal":
        return f"signal {data['name']} for {data['card_id']}"
    return f"{kind}: {data}"


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2))


def output_result(data: dict, text: str, json_mode: bool) -> None:
    """Output result as JSON or plain text."""
    if json_mode:
        output_json(data)
    else:
        print(text)


def error(message: str, json_mode: bool) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)
