"""Write a board working set back to a YAML snapshot file."""

from pathlib import Path

import yaml

from apptboard.lifecycle import Appointment
from apptboard.model.board import Board, Card


def appointment_to_dict(appointment: Appointment, card: Card | None) -> dict:
    """Snapshot entry for one appointment, with its card if on the board."""
    data = {
        "status": appointment.status.value,
        "staff_assigned": appointment.staff_assigned,
        "scheduled_time": appointment.scheduled_time.isoformat() if appointment.scheduled_time else None,
        "service_lines_closed": appointment.service_lines_closed,
        "payment_settled": appointment.payment_settled,
        "staff_available": appointment.staff_available,
    }
    if data["scheduled_time"] is None:
        del data["scheduled_time"]
    if card is not None:
        data["card"] = {"rank": card.rank, "version": card.version}
    return data


def board_to_dict(board: Board) -> dict:
    return {
        "appointments": {
            appointment_id: appointment_to_dict(appointment, board.cards.get(appointment_id))
            for appointment_id, appointment in board.appointments.items()
        }
    }


def save_board(board: Board, path: str | Path) -> None:
    """Write board to path, replacing the file."""
    text = yaml.dump(board_to_dict(board), default_flow_style=False, sort_keys=False)
    Path(path).write_text(text)
