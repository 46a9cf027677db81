"""
Status lifecycles for reservations and repair jobs.

Reservation: unconfirmed/confirmed -> cancelled | completed
    - staff may set any status via edit
    - completed is terminal, cancelled cannot be cancelled again
    - a client may only cancel

Repair job: upcoming -> in_progress -> completed | cancelled
    - staff may set any status via edit
    - a client may cancel only while the job is still upcoming

Mechanics see the schedule read-only and trigger no transitions.
"""

from collections import Counter
from datetime import datetime
from enum import Enum
from typing import Iterable

from core.errors import ValidationCodes, ValidationError


class Role(str, Enum):
    MANAGER = "manager"
    MECHANIC = "mechanic"
    CLIENT = "client"


class RecordKind(str, Enum):
    RESERVATION = "reservation"
    REPAIR_JOB = "repair-job"


class ReservationStatus(str, Enum):
    UNCONFIRMED = "unconfirmed"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class RepairJobStatus(str, Enum):
    UPCOMING = "upcoming"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


STATES = {
    RecordKind.RESERVATION: {s.value for s in ReservationStatus},
    RecordKind.REPAIR_JOB: {s.value for s in RepairJobStatus},
}

TERMINAL_STATES = {
    RecordKind.RESERVATION: {ReservationStatus.COMPLETED.value},
    RecordKind.REPAIR_JOB: set(),
}

CANCELLED = "cancelled"


def normalize_status(value: str | None) -> str | None:
    """Lowercase a status and fold 'In Progress' / 'in-progress' to 'in_progress'."""
    if value is None:
        return None
    status = value.strip().lower().replace("-", "_").replace(" ", "_")
    return status or None


def initial_status(kind: RecordKind, role: Role) -> str:
    """Status a newly created record starts in."""
    if kind == RecordKind.REPAIR_JOB:
        return RepairJobStatus.UPCOMING.value
    if role == Role.CLIENT:
        return ReservationStatus.UNCONFIRMED.value
    return ReservationStatus.CONFIRMED.value


def _transition_error(
    role: Role, kind: RecordKind, current: str | None, target: str | None
) -> ValidationError | None:
    """Return why the transition is illegal, or None when it is allowed."""
    role = Role(role)
    kind = RecordKind(kind)
    current = normalize_status(current)
    target = normalize_status(target)
    label = "reservation" if kind == RecordKind.RESERVATION else "repair job"

    if role == Role.MECHANIC:
        return ValidationError(
            ValidationCodes.READ_ONLY, f"Mechanics cannot change the status of a {label}"
        )

    if target not in STATES[kind]:
        return ValidationError(
            ValidationCodes.ILLEGAL_TRANSITION, f"Unknown {label} status '{target}'"
        )

    if role == Role.CLIENT:
        if target != CANCELLED:
            return ValidationError(
                ValidationCodes.ILLEGAL_TRANSITION, f"Clients may only cancel a {label}"
            )
        if kind == RecordKind.REPAIR_JOB:
            if current != RepairJobStatus.UPCOMING.value:
                return ValidationError(
                    ValidationCodes.NOT_CANCELLABLE,
                    "Repair jobs can only be cancelled while they are upcoming",
                )
            return None
        if current == CANCELLED or current in TERMINAL_STATES[kind]:
            return ValidationError(
                ValidationCodes.NOT_CANCELLABLE, f"Reservation is already {current}"
            )
        return None

    # Staff edits
    if current in TERMINAL_STATES[kind] and target != current:
        return ValidationError(
            ValidationCodes.ILLEGAL_TRANSITION, f"A {current} {label} cannot change status"
        )
    if current == CANCELLED and target == CANCELLED:
        return ValidationError(
            ValidationCodes.NOT_CANCELLABLE, f"The {label} is already cancelled"
        )
    return None


def can_transition(role: Role, kind: RecordKind, current: str | None, target: str | None) -> bool:
    """Check whether `role` may move a record of `kind` from `current` to `target`."""
    return _transition_error(role, kind, current, target) is None


def check_transition(role: Role, kind: RecordKind, current: str | None, target: str | None) -> None:
    """Raise ValidationError if the transition is not allowed."""
    error = _transition_error(role, kind, current, target)
    if error is not None:
        raise error


def display_status(
    status: str | None, start: datetime | None, end: datetime | None, now: datetime
) -> str:
    """
    Time-derived label shown on the mechanic's reservation list.

    Cancelled wins; otherwise the label follows the clock relative to the
    booking: Confirmed before start, In Progress during, Ended after.
    """
    if normalize_status(status) == CANCELLED:
        return "Cancelled"
    if start is None:
        return status or "Unknown"
    if now < start:
        return "Confirmed"
    if end is not None and now > end:
        return "Ended"
    return "In Progress"


def status_counts(statuses: Iterable[str | None]) -> dict[str, int]:
    """Count records per normalized status ('unknown' for missing)."""
    counts = Counter(normalize_status(s) or "unknown" for s in statuses)
    return dict(counts)
