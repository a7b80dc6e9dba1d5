"""Appointment lifecycle: statuses, legal transitions and their guards.

Everything here is a pure function of its arguments. The current time is an
explicit input, so the same appointment snapshot, target and time always give
the same answer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from apptboard.errors import GuardFailure, IllegalTransition


class Status(str, Enum):
    """Appointment status, which is also the board column. Pipeline order."""

    BOOKED = "booked"
    CHECKED_IN = "checked_in"
    IN_SERVICE = "in_service"
    COMPLETED = "completed"
    PAID = "paid"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def terminal(self) -> bool:
        return self in TERMINAL_STATUSES


INITIAL_STATUS = Status.BOOKED
TERMINAL_STATUSES = frozenset({Status.PAID, Status.CANCELLED, Status.NO_SHOW})

_ORDER = {status: i for i, status in enumerate(Status)}


@dataclass(frozen=True)
class Appointment:
    """Snapshot of the facts about one appointment that guards look at."""

    id: str
    status: Status = INITIAL_STATUS
    staff_assigned: bool = False
    scheduled_time: datetime | None = None
    service_lines_closed: bool = False
    payment_settled: bool = False
    staff_available: bool = False


@dataclass(frozen=True)
class LifecyclePolicy:
    """Tunable thresholds for the time-based guards."""

    grace_window: timedelta = timedelta(minutes=15)
    no_show_window: timedelta = timedelta(minutes=15)
    allow_cancel_after_completion: bool = False


DEFAULT_POLICY = LifecyclePolicy()


@dataclass(frozen=True)
class GuardCheck:
    """One evaluated guard in a transition's trace."""

    name: str
    passed: bool


@dataclass(frozen=True)
class TransitionRecord:
    """Audit entry for an accepted status change. Never mutated."""

    appointment_id: str
    from_status: Status
    to_status: Status
    timestamp: datetime
    triggered_by: str
    guard_trace: tuple[GuardCheck, ...] = ()


# A guard returns None when satisfied, otherwise the name of the unmet fact.
GuardFn = Callable[[Appointment, datetime, LifecyclePolicy], "str | None"]


def _staff_assigned(appointment: Appointment, now: datetime, policy: LifecyclePolicy) -> str | None:
    return None if appointment.staff_assigned else "staff_assigned"


def _check_in_window(appointment: Appointment, now: datetime, policy: LifecyclePolicy) -> str | None:
    if appointment.scheduled_time is None:
        return "scheduled_time"
    if now >= appointment.scheduled_time - policy.grace_window:
        return None
    return "check_in_window"


def _no_show_window(appointment: Appointment, now: datetime, policy: LifecyclePolicy) -> str | None:
    if appointment.scheduled_time is None:
        return "scheduled_time"
    if now > appointment.scheduled_time + policy.no_show_window:
        return None
    return "no_show_window"


def _staff_available(appointment: Appointment, now: datetime, policy: LifecyclePolicy) -> str | None:
    return None if appointment.staff_available else "staff_available"


def _service_lines_closed(appointment: Appointment, now: datetime, policy: LifecyclePolicy) -> str | None:
    return None if appointment.service_lines_closed else "service_lines_closed"


def _payment_settled(appointment: Appointment, now: datetime, policy: LifecyclePolicy) -> str | None:
    return None if appointment.payment_settled else "payment_settled"


TRANSITIONS: dict[tuple[Status, Status], tuple[tuple[str, GuardFn], ...]] = {
    (Status.BOOKED, Status.CHECKED_IN): (
        ("staff_assigned", _staff_assigned),
        ("check_in_window", _check_in_window),
    ),
    (Status.BOOKED, Status.CANCELLED): (),
    (Status.BOOKED, Status.NO_SHOW): (("no_show_window", _no_show_window),),
    (Status.CHECKED_IN, Status.IN_SERVICE): (("staff_available", _staff_available),),
    (Status.CHECKED_IN, Status.CANCELLED): (),
    (Status.IN_SERVICE, Status.COMPLETED): (("service_lines_closed", _service_lines_closed),),
    (Status.COMPLETED, Status.PAID): (("payment_settled", _payment_settled),),
}


def transition_table(policy: LifecyclePolicy = DEFAULT_POLICY) -> dict[tuple[Status, Status], tuple]:
    """Return the transition table in force under policy."""
    if not policy.allow_cancel_after_completion:
        return TRANSITIONS
    table = dict(TRANSITIONS)
    table[(Status.COMPLETED, Status.CANCELLED)] = ()
    return table


def is_forward(from_status: Status, to_status: Status) -> bool:
    """True if to_status comes after from_status in pipeline order."""
    return _ORDER[to_status] > _ORDER[from_status]


def allowed_targets(status: Status, policy: LifecyclePolicy = DEFAULT_POLICY) -> list[Status]:
    """Statuses reachable from status in one transition, in pipeline order."""
    table = transition_table(policy)
    return [target for target in Status if (status, target) in table]


def next_status(status: Status, policy: LifecyclePolicy = DEFAULT_POLICY) -> Status | None:
    """The immediate next step in the pipeline, skipping cancel and no-show.

    None when the appointment can only be cancelled or is terminal.
    """
    for target in allowed_targets(status, policy):
        if target not in (Status.CANCELLED, Status.NO_SHOW):
            return target
    return None


def transition_error_message(from_status: Status, to_status: Status) -> str:
    """Explain why from_status → to_status is not allowed."""
    if from_status == to_status:
        return f"Appointment is already {from_status.label}"
    if from_status.terminal:
        return f"{from_status.label} is final; no further status changes are allowed"
    if from_status == Status.COMPLETED and to_status == Status.CANCELLED:
        return "Completed appointments cannot be cancelled; use the refund flow instead"
    if not is_forward(from_status, to_status):
        return f"Cannot move backward from {from_status.label} to {to_status.label}"
    allowed = ", ".join(s.label for s in allowed_targets(from_status)) or "nothing"
    return f"Cannot move from {from_status.label} to {to_status.label}; allowed: {allowed}"


def attempt_transition(
    appointment: Appointment,
    target: Status,
    now: datetime,
    policy: LifecyclePolicy = DEFAULT_POLICY,
    triggered_by: str = "system",
) -> TransitionRecord:
    """Validate moving appointment to target and return the audit record.

    Raises IllegalTransition when the pair is not in the table and
    GuardFailure, listing every unmet condition, when a guard fails.
    """
    current = appointment.status
    guards = transition_table(policy).get((current, target))
    if guards is None:
        raise IllegalTransition(current, target, transition_error_message(current, target))

    trace = []
    reasons = []
    for name, guard in guards:
        reason = guard(appointment, now, policy)
        trace.append(GuardCheck(name, reason is None))
        if reason is not None:
            reasons.append(reason)

    if reasons:
        raise GuardFailure(current, target, reasons, tuple(trace))

    return TransitionRecord(
        appointment_id=appointment.id,
        from_status=current,
        to_status=target,
        timestamp=now,
        triggered_by=triggered_by,
        guard_trace=tuple(trace),
    )
