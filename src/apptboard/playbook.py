"""Playbooks: named sequences of board operations applied as one unit.

A playbook runs against a single card. Steps are applied in order; when one
fails, every step already applied is undone in reverse order from its
recorded pre-state before the failure is raised, so callers only ever see
all of the playbook or none of it.
"""

import logging
import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from apptboard.errors import CompensationFailure, ConfigError, PlaybookFailure, UnknownPlaybook, VersionConflict
from apptboard.lifecycle import Status, TransitionRecord
from apptboard.model.board import Board, Mutation, RankUpdate, column_cards, find_card
from apptboard.model.card import advance_card, move_card, remove_card, reorder_card, restore_cards
from apptboard.model.events import ExternalSignal

logger = logging.getLogger(__name__)

STEP_KINDS = ("move", "reorder", "advance", "remove", "signal")
POSITIONS = ("end", "start")


@dataclass(frozen=True)
class Step:
    """One playbook step.

    target is the column for ``move`` and the signal name for ``signal``;
    position places the card at the ``end`` or ``start`` of its column.
    """

    kind: str
    target: str | None = None
    position: str = "end"

    def describe(self) -> str:
        if self.kind == "move":
            return f"move to {self.target} ({self.position})"
        if self.kind == "reorder":
            return f"reorder to {self.position}"
        if self.kind == "signal":
            return f"signal {self.target}"
        return self.kind


@dataclass(frozen=True)
class Playbook:
    name: str
    steps: tuple[Step, ...]
    description: str = ""


@dataclass(frozen=True)
class PlaybookContext:
    """What a run applies to.

    version, when given, is the card version the caller last saw; the run
    is refused with VersionConflict before any step if it has moved on.
    """

    card_id: str
    now: datetime | None = None
    triggered_by: str = "system"
    version: int | None = None


@dataclass
class PlaybookResult:
    playbook: str
    card_id: str
    correlation_id: str
    events: list[Any] = field(default_factory=list)
    transition_records: list[TransitionRecord] = field(default_factory=list)
    rank_updates: list[RankUpdate] = field(default_factory=list)
    elapsed_ms: float = 0.0


def _recipe(name: str, description: str, *steps: Step) -> Playbook:
    return Playbook(name, steps, description)


BUILTIN_PLAYBOOKS = {
    p.name: p
    for p in (
        _recipe(
            "check_in_and_notify",
            "Check the client in and let them know",
            Step("move", Status.CHECKED_IN.value),
            Step("signal", "notify_client"),
        ),
        _recipe(
            "start_service",
            "Start the service and tell the assigned staff member",
            Step("move", Status.IN_SERVICE.value),
            Step("signal", "notify_staff"),
        ),
        _recipe(
            "complete_and_checkout",
            "Complete the service and open a checkout",
            Step("move", Status.COMPLETED.value),
            Step("signal", "initiate_checkout"),
        ),
        _recipe(
            "settle_payment",
            "Mark the appointment paid and send the receipt",
            Step("move", Status.PAID.value),
            Step("signal", "send_receipt"),
        ),
        _recipe(
            "cancel_and_notify",
            "Cancel the appointment and let the client know",
            Step("move", Status.CANCELLED.value),
            Step("signal", "notify_client"),
        ),
        _recipe(
            "mark_no_show",
            "Record a no-show and let the client know",
            Step("move", Status.NO_SHOW.value),
            Step("signal", "notify_client"),
        ),
    )
}


def parse_step(data: Any) -> Step:
    """Build a Step from its config form.

    Accepted forms: ``"advance"``, ``{"move": "checked_in"}``,
    ``{"move": {"column": "checked_in", "position": "start"}}``,
    ``{"reorder": "start"}``, ``{"signal": "notify_client"}``.
    """
    if isinstance(data, str):
        data = {data: None}
    if not isinstance(data, dict) or len(data) != 1:
        raise ConfigError(f"step must be a single-key mapping, got {data!r}")

    kind, value = next(iter(data.items()))
    if kind not in STEP_KINDS:
        raise ConfigError(f"unknown step kind {kind!r}; expected one of {', '.join(STEP_KINDS)}")

    if kind == "move":
        if isinstance(value, dict):
            column, position = value.get("column"), value.get("position", "end")
        else:
            column, position = value, "end"
        if column not in {s.value for s in Status}:
            raise ConfigError(f"move step needs a known column, got {column!r}")
        step = Step(kind, column, position)
    elif kind == "reorder":
        step = Step(kind, position=value or "end")
    elif kind == "signal":
        if not value or not isinstance(value, str):
            raise ConfigError("signal step needs a name")
        step = Step(kind, value)
    else:
        step = Step(kind)

    if step.position not in POSITIONS:
        raise ConfigError(f"position must be one of {', '.join(POSITIONS)}, got {step.position!r}")
    return step


def parse_playbooks(data: Any) -> dict[str, Playbook]:
    """Build playbooks from a ``{name: {description, steps}}`` mapping.

    A bare list of steps is accepted in place of the mapping.
    """
    if not data:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("playbooks must be a mapping of name to steps")

    playbooks = {}
    for name, body in data.items():
        if isinstance(body, list):
            body = {"steps": body}
        if not isinstance(body, dict) or not body.get("steps"):
            raise ConfigError(f"playbook {name!r} has no steps")
        steps = tuple(parse_step(s) for s in body["steps"])
        playbooks[str(name)] = Playbook(str(name), steps, str(body.get("description", "")))
    return playbooks


def new_correlation_id() -> str:
    """Run id like ``PB-20261018093000-1f2e3d4c``."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"PB-{stamp}-{secrets.token_hex(4)}"


def _neighbors_for(board: Board, column: Status, position: str, card_id: str) -> tuple[str | None, str | None]:
    """Neighbour ids that place card_id at the start or end of column."""
    ids = [card.appointment_id for card in column_cards(board, column) if card.appointment_id != card_id]
    if not ids:
        return None, None
    if position == "start":
        return None, ids[0]
    return ids[-1], None


def _apply_step(board: Board, step: Step, context: PlaybookContext, now: datetime) -> Mutation:
    card_id = context.card_id

    if step.kind == "signal":
        return Mutation(placement=None, events=[ExternalSignal(step.target, card_id)])

    card = find_card(board, card_id)
    if step.kind == "move":
        column = Status(step.target)
        after_id, before_id = _neighbors_for(board, column, step.position, card_id)
        return move_card(
            board,
            card_id,
            column,
            after_id,
            before_id,
            version=card.version,
            now=now,
            triggered_by=context.triggered_by,
        )
    if step.kind == "reorder":
        after_id, before_id = _neighbors_for(board, card.column, step.position, card_id)
        return reorder_card(board, card_id, after_id, before_id, version=card.version)
    if step.kind == "advance":
        return advance_card(board, card_id, version=card.version, now=now, triggered_by=context.triggered_by)
    if step.kind == "remove":
        return remove_card(board, card_id, version=card.version)
    raise ValueError(f"unknown step kind {step.kind!r}")


def _compensate(
    board: Board,
    playbook: Playbook,
    failed_step: int,
    error: Exception,
    applied: list[tuple[int, Mutation, dict[str, int | None]]],
    correlation_id: str,
) -> None:
    """Undo applied steps newest first, then raise the failure."""
    undone: list[int] = []
    for number, mutation, expected in reversed(applied):
        try:
            restore_cards(board, mutation.previous, expected, mutation.previous_appointment)
        except Exception as exc:
            logger.critical(
                "playbook %s [%s] left the board inconsistent: undoing step %d failed: %s",
                playbook.name,
                correlation_id,
                number,
                exc,
            )
            raise CompensationFailure(playbook.name, failed_step, number, exc, undone) from exc
        undone.append(number)

    logger.warning(
        "playbook %s [%s] failed at step %d (%s): %s; undid steps %s",
        playbook.name,
        correlation_id,
        failed_step,
        playbook.steps[failed_step - 1].describe(),
        error,
        undone or "none",
    )
    raise PlaybookFailure(playbook.name, failed_step, error, undone) from error


def run_playbook(
    board: Board,
    registry: dict[str, Playbook],
    name: str,
    context: PlaybookContext,
) -> PlaybookResult:
    """Apply the named playbook to context.card_id.

    Raises UnknownPlaybook, UnknownCard (card not on the board),
    VersionConflict (stale context.version),
    PlaybookFailure (a step failed, earlier steps undone) or
    CompensationFailure (undoing failed, board needs reconciling).
    """
    playbook = registry.get(name)
    if playbook is None:
        raise UnknownPlaybook(f"no playbook named {name!r}")

    correlation_id = new_correlation_id()
    started = time.perf_counter()
    now = context.now or datetime.now(timezone.utc)

    card = find_card(board, context.card_id)
    if context.version is not None and card.version != context.version:
        raise VersionConflict(card.appointment_id, context.version, card.version)

    applied: list[tuple[int, Mutation, dict[str, int | None]]] = []
    for number, step in enumerate(playbook.steps, start=1):
        try:
            mutation = _apply_step(board, step, context, now)
        except Exception as exc:
            _compensate(board, playbook, number, exc, applied, correlation_id)
        expected = {
            card_id: board.cards[card_id].version if card_id in board.cards else None
            for card_id in mutation.previous
        }
        applied.append((number, mutation, expected))

    result = PlaybookResult(playbook.name, context.card_id, correlation_id)
    for _, mutation, _ in applied:
        result.events.extend(mutation.events)
        if mutation.transition is not None:
            result.transition_records.append(mutation.transition)
        result.rank_updates.extend(mutation.rank_updates)
    result.elapsed_ms = (time.perf_counter() - started) * 1000

    logger.info(
        "playbook %s [%s] applied to %s: %d events in %.1f ms",
        playbook.name,
        correlation_id,
        context.card_id,
        len(result.events),
        result.elapsed_ms,
    )
    return result
