"""
Reservation and repair job to calendar event transformation.
"""

from datetime import datetime, timedelta

from core.config import (
    DEFAULT_REPAIR_JOB_MINUTES,
    DEFAULT_REPAIR_JOB_SERVICE,
    DEFAULT_RESERVATION_MINUTES,
    DEFAULT_RESERVATION_SERVICE,
    UNKNOWN_CLIENT_NAME,
)
from core.lifecycle import RecordKind
from models.events import CalendarEvent
from models.records import RepairJob, Reservation


def _resolve_end(start: datetime, end: datetime | None, default_minutes: int) -> datetime:
    """Explicit end if it comes after start, otherwise start + default duration."""
    if end is not None and end > start:
        return end
    return start + timedelta(minutes=default_minutes)


def reservation_to_event(reservation: Reservation) -> CalendarEvent | None:
    """
    Build the calendar event for a reservation.

    Title is "Client Name - Car Model" (falls back to make, then to the
    client name alone). Returns None when the reservation has no start.
    """
    if reservation.visit_start is None:
        return None

    start = reservation.visit_start
    end = _resolve_end(start, reservation.visit_end, DEFAULT_RESERVATION_MINUTES)

    client_name = (reservation.client.name if reservation.client else None) or UNKNOWN_CLIENT_NAME
    car_info = ""
    if reservation.car:
        car_info = reservation.car.model or reservation.car.make or ""
    service_name = (
        reservation.service.service_name if reservation.service else None
    ) or DEFAULT_RESERVATION_SERVICE

    return CalendarEvent(
        id=reservation.id or 0,
        kind=RecordKind.RESERVATION,
        title=f"{client_name} - {car_info}" if car_info else client_name,
        label=f"Reservation - {service_name}",
        start=start,
        end=end,
        status=reservation.status,
        resource=reservation,
    )


def repair_job_to_event(job: RepairJob) -> CalendarEvent | None:
    """
    Build the calendar event for a repair job.

    Without an explicit end the service's estimated duration is used when
    positive, then the two hour default. Returns None when the job has no start.
    """
    if job.start is None:
        return None

    default_minutes = DEFAULT_REPAIR_JOB_MINUTES
    if job.service and (job.service.estimated_duration or 0) > 0:
        default_minutes = job.service.estimated_duration
    end = _resolve_end(job.start, job.end, default_minutes)

    client_name = (job.client.name if job.client else None) or UNKNOWN_CLIENT_NAME
    service_name = (job.service.service_name if job.service else None) or DEFAULT_REPAIR_JOB_SERVICE

    return CalendarEvent(
        id=job.id or 0,
        kind=RecordKind.REPAIR_JOB,
        title=client_name,
        label=f"Repair Job - {service_name}",
        start=job.start,
        end=end,
        status=job.status,
        resource=job,
    )


def to_event(record: Reservation | RepairJob) -> CalendarEvent | None:
    """Dispatch on record type."""
    if isinstance(record, Reservation):
        return reservation_to_event(record)
    return repair_job_to_event(record)


def transform_all(
    reservations: list[Reservation], repair_jobs: list[RepairJob]
) -> list[CalendarEvent]:
    """
    Unified timeline: reservation events then repair job events, sorted by start.

    The sort is stable, so events starting at the same instant keep that
    relative order.
    """
    events = [event for event in map(reservation_to_event, reservations) if event]
    events.extend(event for event in map(repair_job_to_event, repair_jobs) if event)
    return sorted(events, key=lambda event: event.start)
