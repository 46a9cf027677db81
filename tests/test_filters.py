"""Tests for schedule search and filters."""

from datetime import date

from conftest import utc
from models.events import ScheduleFilter
from models.records import Reservation
from services.filters import (
    active_filter_count,
    apply_filters,
    apply_repair_job_filters,
    apply_reservation_filters,
    has_active_filters,
    records_in_range,
    records_on_date,
)


def ids(records):
    return [record.id for record in records]


def test_empty_filter_returns_everything_in_order(reservations):
    result = apply_filters(reservations, ScheduleFilter())
    assert ids(result) == [1, 2, 3]
    assert result is not reservations


def test_none_filter_is_pass_through(repair_jobs):
    assert ids(apply_filters(repair_jobs, None)) == [1, 2]


def test_search_matches_car_model_case_insensitive(reservations):
    assert ids(apply_reservation_filters(reservations, None, "civic")) == [2]


def test_search_matches_service_name(reservations):
    assert ids(apply_reservation_filters(reservations, None, "oil")) == [1]


def test_search_matches_repair_job_mechanic(repair_jobs):
    assert ids(apply_repair_job_filters(repair_jobs, None, "sara")) == [2]


def test_blank_search_is_ignored(reservations):
    assert ids(apply_filters(reservations, None, "   ")) == [1, 2, 3]


def test_date_range_is_inclusive(reservations):
    schedule_filter = ScheduleFilter(date_from=utc(2024, 1, 10, 9, 0), date_to=utc(2024, 1, 10, 14, 0))
    assert ids(apply_filters(reservations, schedule_filter)) == [1, 2]


def test_open_ended_date_range(reservations):
    assert ids(apply_filters(reservations, ScheduleFilter(date_from=utc(2024, 1, 11)))) == [3]
    assert ids(apply_filters(reservations, ScheduleFilter(date_to=utc(2024, 1, 10, 12)))) == [1]


def test_record_without_start_never_matches_active_range():
    records = [Reservation(id=9)]
    assert apply_filters(records, ScheduleFilter(date_from=utc(2024, 1, 1))) == []
    assert ids(apply_filters(records, ScheduleFilter())) == [9]


def test_naive_filter_dates_are_workshop_time(reservations):
    schedule_filter = ScheduleFilter.model_validate({"date_from": "2024-01-12T00:00:00"})
    assert ids(apply_filters(reservations, schedule_filter)) == [3]


def test_reference_filters(reservations, repair_jobs):
    assert ids(apply_filters(reservations, ScheduleFilter(client_id=1))) == [1, 3]
    assert ids(apply_filters(reservations, ScheduleFilter(mechanic_id=11))) == [2, 3]
    assert ids(apply_filters(reservations, ScheduleFilter(service_id=100))) == [1, 3]
    assert ids(apply_filters(repair_jobs, ScheduleFilter(mechanic_id=10))) == [1]


def test_car_filter_excludes_repair_jobs(reservations, repair_jobs):
    assert ids(apply_filters(reservations, ScheduleFilter(car_id=50))) == [1, 3]
    assert apply_filters(repair_jobs, ScheduleFilter(car_id=50)) == []


def test_status_filter_is_normalized(repair_jobs, reservations):
    assert ids(apply_filters(repair_jobs, ScheduleFilter(status="in-progress"))) == [2]
    assert ids(apply_filters(reservations, ScheduleFilter(status="CANCELLED"))) == [3]


def test_filters_are_and_combined(reservations):
    schedule_filter = ScheduleFilter(client_id=1, status="confirmed")
    assert ids(apply_filters(reservations, schedule_filter, "corolla")) == [1]
    assert apply_filters(reservations, schedule_filter, "civic") == []


def test_input_is_not_mutated(reservations):
    before = [r.model_copy() for r in reservations]
    apply_filters(reservations, ScheduleFilter(client_id=2), "bob")
    assert reservations == before


def test_active_filter_count():
    assert active_filter_count(None) == 0
    assert active_filter_count(ScheduleFilter()) == 0
    assert active_filter_count(ScheduleFilter(date_from=utc(2024, 1, 1), date_to=utc(2024, 2, 1))) == 1
    assert active_filter_count(ScheduleFilter(client_id=1, car_id=2, status="confirmed")) == 3
    assert not has_active_filters(ScheduleFilter(status="  "))
    assert has_active_filters(ScheduleFilter(mechanic_id=10))


def test_records_on_date(reservations, repair_jobs):
    assert ids(records_on_date(reservations, date(2024, 1, 10))) == [1, 2]
    assert ids(records_on_date(repair_jobs, date(2024, 1, 9))) == [2]


def test_records_in_range(reservations):
    assert ids(records_in_range(reservations, utc(2024, 1, 10, 9), utc(2024, 1, 10, 9))) == [1]
