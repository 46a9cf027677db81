"""
Search and structured filtering over raw reservations and repair jobs.

Both record types go through the same rule shape; only the field access
differs. Every rule is a pass-through when its filter field is empty.
"""

from datetime import date, datetime
from typing import Callable, Iterable, TypeVar

from core.lifecycle import normalize_status
from models.events import ScheduleFilter
from models.records import RepairJob, Reservation

Record = TypeVar("Record", Reservation, RepairJob)


# =============================================================================
# FIELD ACCESS
# =============================================================================


def record_start(record: Reservation | RepairJob) -> datetime | None:
    """Timestamp the date filters look at."""
    if isinstance(record, Reservation):
        return record.visit_start
    return record.start


def search_fields(record: Reservation | RepairJob) -> list[str | None]:
    """Text fields matched by free-text search."""
    client_name = record.client.name if record.client else None
    service_name = record.service.service_name if record.service else None
    if isinstance(record, Reservation):
        car = record.car
        return [
            client_name,
            car.model if car else None,
            car.make if car else None,
            service_name,
        ]
    mechanic_name = record.mechanic.name if record.mechanic else None
    return [client_name, service_name, mechanic_name]


def _car_id(record: Reservation | RepairJob) -> int | None:
    # Repair jobs carry no car reference
    return getattr(record, "car_id", None)


# =============================================================================
# RULES
# =============================================================================


def matches_search(record: Reservation | RepairJob, search_text: str) -> bool:
    query = search_text.strip().lower()
    if not query:
        return True
    return any(field and query in field.lower() for field in search_fields(record))


def matches_date_range(
    record: Reservation | RepairJob, date_from: datetime | None, date_to: datetime | None
) -> bool:
    if date_from is None and date_to is None:
        return True
    start = record_start(record)
    if start is None:
        return False
    if date_from is not None and start < date_from:
        return False
    if date_to is not None and start > date_to:
        return False
    return True


def matches_references(record: Reservation | RepairJob, schedule_filter: ScheduleFilter) -> bool:
    checks = [
        (schedule_filter.client_id, record.client_id),
        (schedule_filter.mechanic_id, record.mechanic_id),
        (schedule_filter.service_id, record.service_id),
        (schedule_filter.car_id, _car_id(record)),
    ]
    return all(wanted is None or wanted == actual for wanted, actual in checks)


def matches_status(record: Reservation | RepairJob, status: str | None) -> bool:
    wanted = normalize_status(status)
    if wanted is None:
        return True
    return normalize_status(record.status) == wanted


def record_matches(
    record: Reservation | RepairJob, schedule_filter: ScheduleFilter, search_text: str = ""
) -> bool:
    """All rules AND-combined: search, date range, references, status."""
    return (
        matches_search(record, search_text)
        and matches_date_range(record, schedule_filter.date_from, schedule_filter.date_to)
        and matches_references(record, schedule_filter)
        and matches_status(record, schedule_filter.status)
    )


def apply_filters(
    records: Iterable[Record], schedule_filter: ScheduleFilter | None, search_text: str = ""
) -> list[Record]:
    """
    Return the records passing every active rule, in their original order.

    The input is never mutated; an empty filter and empty search return a
    copy of the input.
    """
    schedule_filter = schedule_filter or ScheduleFilter()
    return [record for record in records if record_matches(record, schedule_filter, search_text)]


def apply_reservation_filters(
    reservations: Iterable[Reservation], schedule_filter: ScheduleFilter | None, search_text: str = ""
) -> list[Reservation]:
    return apply_filters(reservations, schedule_filter, search_text)


def apply_repair_job_filters(
    repair_jobs: Iterable[RepairJob], schedule_filter: ScheduleFilter | None, search_text: str = ""
) -> list[RepairJob]:
    return apply_filters(repair_jobs, schedule_filter, search_text)


# =============================================================================
# FILTER SUMMARY
# =============================================================================


def active_filter_count(schedule_filter: ScheduleFilter | None) -> int:
    """Number of constrained dimensions; the date range counts once."""
    if schedule_filter is None:
        return 0
    dimensions = [
        schedule_filter.date_from is not None or schedule_filter.date_to is not None,
        schedule_filter.client_id is not None,
        schedule_filter.mechanic_id is not None,
        schedule_filter.service_id is not None,
        schedule_filter.car_id is not None,
        bool(normalize_status(schedule_filter.status)),
    ]
    return sum(dimensions)


def has_active_filters(schedule_filter: ScheduleFilter | None) -> bool:
    return active_filter_count(schedule_filter) > 0


# =============================================================================
# DATE HELPERS
# =============================================================================


def records_on_date(records: Iterable[Record], day: date) -> list[Record]:
    """Records whose start falls on `day` (in the record's own timezone)."""
    return _select(records, lambda start: start.date() == day)


def records_in_range(records: Iterable[Record], start: datetime, end: datetime) -> list[Record]:
    """Records starting within [start, end] inclusive."""
    return _select(records, lambda record_time: start <= record_time <= end)


def _select(records: Iterable[Record], predicate: Callable[[datetime], bool]) -> list[Record]:
    selected = []
    for record in records:
        start = record_start(record)
        if start is not None and predicate(start):
            selected.append(record)
    return selected
