"""Load a board working set from a YAML snapshot file.

Snapshot layout, keyed by appointment id. A ``card`` entry puts the
appointment on the board in the column named by its status::

    appointments:
      a1:
        status: booked
        staff_assigned: true
        scheduled_time: 2026-10-18T10:00:00+00:00
        card: {rank: i, version: 3}
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from apptboard.errors import SnapshotError
from apptboard.lifecycle import DEFAULT_POLICY, Appointment, LifecyclePolicy, Status
from apptboard.model.board import Board, Card
from apptboard.rank import DEFAULT_MAX_LENGTH, DEFAULT_STEP

_FLAGS = ("staff_assigned", "service_lines_closed", "payment_settled", "staff_available")


def _parse_time(value: Any) -> datetime | None:
    """Accept a YAML timestamp, an ISO string or nothing. Naive times are taken as UTC."""
    if value is None:
        return None
    if not isinstance(value, datetime):
        try:
            value = datetime.fromisoformat(str(value))
        except ValueError as e:
            raise SnapshotError(f"bad scheduled_time {value!r}") from e
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _parse_version(appointment_id: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"appointment {appointment_id}: card version must be a whole number, got {value!r}") from e


def _parse_appointment(appointment_id: str, data: dict) -> tuple[Appointment, Card | None]:
    """Build an Appointment and its optional Card from one snapshot entry."""
    if not isinstance(data, dict):
        raise SnapshotError(f"appointment {appointment_id}: entry must be a mapping")
    try:
        status = Status(data.get("status", Status.BOOKED.value))
    except ValueError as e:
        raise SnapshotError(f"appointment {appointment_id}: unknown status {data.get('status')!r}") from e

    appointment = Appointment(
        id=appointment_id,
        status=status,
        scheduled_time=_parse_time(data.get("scheduled_time")),
        **{flag: bool(data.get(flag, False)) for flag in _FLAGS},
    )

    card_data = data.get("card")
    if card_data is None:
        return appointment, None
    if not isinstance(card_data, dict) or "rank" not in card_data:
        raise SnapshotError(f"appointment {appointment_id}: card needs a rank")
    card = Card(
        appointment_id=appointment_id,
        column=status,
        rank=str(card_data["rank"]),
        version=_parse_version(appointment_id, card_data.get("version", 1)),
    )
    return appointment, card


def parse_board(
    data: dict | None,
    policy: LifecyclePolicy = DEFAULT_POLICY,
    rank_step: int = DEFAULT_STEP,
    max_rank_length: int = DEFAULT_MAX_LENGTH,
) -> Board:
    """Build a Board from already-parsed snapshot data."""
    board = Board(policy=policy, rank_step=rank_step, max_rank_length=max_rank_length)
    entries = (data or {}).get("appointments") or {}
    if not isinstance(entries, dict):
        raise SnapshotError("appointments must be a mapping keyed by id")

    for appointment_id, entry in entries.items():
        appointment, card = _parse_appointment(str(appointment_id), entry or {})
        board.appointments[appointment.id] = appointment
        if card is not None:
            board.cards[card.appointment_id] = card

    return board


def load_board(
    path: str | Path,
    policy: LifecyclePolicy = DEFAULT_POLICY,
    rank_step: int = DEFAULT_STEP,
    max_rank_length: int = DEFAULT_MAX_LENGTH,
) -> Board:
    """Read a snapshot file into a Board."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text())
    except OSError as e:
        raise SnapshotError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise SnapshotError(f"{path} is not valid YAML: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise SnapshotError(f"{path} must contain a mapping")
    return parse_board(data, policy, rank_step, max_rank_length)
