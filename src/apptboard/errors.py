"""Error taxonomy for board and playbook operations.

Every error carries a ``retryable`` flag: retryable errors go away once the
caller refetches the board or the blocking condition changes, the rest point
at a caller bug or at a board that needs reconciling by hand.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from apptboard.lifecycle import GuardCheck, Status


class BoardError(Exception):
    """Base class for errors raised by the board core."""

    retryable = False


class ConfigError(Exception):
    """Configuration file could not be read or is invalid."""


class IllegalTransition(BoardError):
    """The requested status change is not in the transition table."""

    def __init__(self, from_status: Status, to_status: Status, message: str | None = None) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(message or f"{from_status.value} → {to_status.value} is not a legal transition")


class GuardFailure(BoardError):
    """A listed transition whose precondition is not met.

    ``reason`` is the first unmet condition, ``reasons`` all of them.
    """

    retryable = True

    def __init__(
        self,
        from_status: Status,
        to_status: Status,
        reasons: list[str],
        trace: tuple[GuardCheck, ...] = (),
    ) -> None:
        self.from_status = from_status
        self.to_status = to_status
        self.reasons = list(reasons)
        self.reason = self.reasons[0]
        self.trace = trace
        super().__init__(
            f"{from_status.value} → {to_status.value} blocked: {', '.join(self.reasons)}"
        )


class StaleNeighbor(BoardError):
    """The claimed neighbours are not adjacent in the target column."""

    retryable = True


class VersionConflict(BoardError):
    """The card changed since the caller last read it."""

    retryable = True

    def __init__(self, card_id: str, expected: int, actual: int) -> None:
        self.card_id = card_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"card {card_id} is at version {actual}, not {expected}")


class UnknownCard(BoardError):
    """No card with that id is on the board."""

    def __init__(self, card_id: str) -> None:
        self.card_id = card_id
        super().__init__(f"card {card_id!r} not found")


class DuplicateCard(BoardError):
    """A card for that appointment is already on the board."""


class StatusMismatch(BoardError):
    """A card would land in a column that disagrees with its appointment status."""


class PlaybookError(BoardError):
    """Base class for playbook errors."""


class UnknownPlaybook(PlaybookError):
    """No playbook is registered under that name."""


class PlaybookFailure(PlaybookError):
    """A playbook step failed and every earlier step was undone.

    The board is consistent again; ``reason`` is the error raised by the
    failing step and ``failed_step`` its 1-based number.
    """

    def __init__(
        self,
        playbook: str,
        failed_step: int,
        reason: BaseException,
        compensations: list[int],
    ) -> None:
        self.playbook = playbook
        self.failed_step = failed_step
        self.reason = reason
        self.compensations = compensations
        self.retryable = getattr(reason, "retryable", False)
        super().__init__(f"playbook {playbook!r} failed at step {failed_step}: {reason}")


class CompensationFailure(PlaybookError):
    """Undoing a playbook step failed; the board needs external reconciliation."""

    def __init__(
        self,
        playbook: str,
        failed_step: int,
        compensation_step: int,
        reason: Any,
        compensations: list[int],
    ) -> None:
        self.playbook = playbook
        self.failed_step = failed_step
        self.compensation_step = compensation_step
        self.reason = reason
        self.compensations = compensations
        super().__init__(
            f"playbook {playbook!r} could not undo step {compensation_step} "
            f"after step {failed_step} failed: {reason}"
        )


class SnapshotError(Exception):
    """A board snapshot file could not be read or is malformed."""
