"""Domain events emitted by board operations and playbooks."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from apptboard.lifecycle import Status, TransitionRecord


@dataclass(frozen=True)
class CardInserted:
    kind: ClassVar[str] = "card_inserted"

    card_id: str
    column: Status
    rank: str
    version: int


@dataclass(frozen=True)
class CardMoved:
    kind: ClassVar[str] = "card_moved"

    card_id: str
    from_column: Status
    to_column: Status
    rank: str
    version: int


@dataclass(frozen=True)
class CardReordered:
    kind: ClassVar[str] = "card_reordered"

    card_id: str
    column: Status
    from_rank: str
    rank: str
    version: int


@dataclass(frozen=True)
class CardRemoved:
    kind: ClassVar[str] = "card_removed"

    card_id: str
    column: Status
    version: int


@dataclass(frozen=True)
class ExternalSignal:
    """Request for an outside collaborator (notifications, checkout) to act."""

    kind: ClassVar[str] = "signal"

    name: str
    card_id: str


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


def event_to_dict(event: Any) -> dict:
    """Flatten an event or TransitionRecord into JSON-ready primitives."""
    data = _plain(asdict(event))
    if isinstance(event, TransitionRecord):
        data["kind"] = "transition"
    else:
        data["kind"] = event.kind
    return data
