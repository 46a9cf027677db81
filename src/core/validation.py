"""
Booking duration validation.

Only reservations are bounded; repair jobs may span several days.
"""

from datetime import datetime

from core.config import RESERVATION_MAX_MINUTES, RESERVATION_MIN_MINUTES
from core.errors import ValidationCodes, ValidationError


def duration_minutes(start: datetime, end: datetime) -> float:
    """Length of the booking in (possibly fractional) minutes."""
    return (end - start).total_seconds() / 60


def validate_duration(start: datetime | None, end: datetime | None) -> ValidationError | None:
    """
    Validate a reservation's start/end pair.

    Checks, in order:
    1. End is after start
    2. At least RESERVATION_MIN_MINUTES long
    3. At most RESERVATION_MAX_MINUTES long

    A draft booking (start or end not chosen yet) is not validated.

    Returns:
        The first failing ValidationError, or None if the pair is acceptable.
    """
    if start is None or end is None:
        return None

    if end <= start:
        return ValidationError(ValidationCodes.INVALID_ORDER, "End time must be after start time")

    minutes = duration_minutes(start, end)
    if minutes < RESERVATION_MIN_MINUTES:
        return ValidationError(
            ValidationCodes.TOO_SHORT,
            f"Reservation duration must be at least {RESERVATION_MIN_MINUTES} minutes",
        )
    if minutes > RESERVATION_MAX_MINUTES:
        return ValidationError(
            ValidationCodes.TOO_LONG,
            f"Reservation duration cannot exceed {RESERVATION_MAX_MINUTES // 60} hours",
        )

    return None


def require_valid_duration(start: datetime | None, end: datetime | None) -> None:
    """Raise the ValidationError from validate_duration, if any."""
    error = validate_duration(start, end)
    if error is not None:
        raise error


def validate_order(start: datetime | None, end: datetime | None) -> ValidationError | None:
    """Ordering check alone, for bookings without a duration ceiling (repair jobs)."""
    if start is None or end is None or end > start:
        return None
    return ValidationError(ValidationCodes.INVALID_ORDER, "End time must be after start time")
