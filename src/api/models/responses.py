"""Pydantic response models for API endpoints."""

from datetime import date, datetime

from pydantic import BaseModel

from core.lifecycle import display_status, status_counts
from models.events import CalendarEvent, Notification, ScheduleView, ViewWindow
from models.records import RepairJob, Reservation


def record_body(record: Reservation | RepairJob) -> dict:
    """Record as returned by the API (camelCase, nulls dropped)."""
    return record.model_dump(mode="json", by_alias=True, exclude_none=True)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    data_store_configured: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    DATA_STORE_UNAVAILABLE = "DATA_STORE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class WindowResponse(BaseModel):
    """Calendar window with its display bounds."""

    view: str
    anchor: date
    title: str
    range_start: datetime
    range_end: datetime
    min_time: datetime | None = None
    max_time: datetime | None = None

    @classmethod
    def from_window(cls, window: ViewWindow) -> "WindowResponse":
        range_start, range_end = window.range()
        return cls(
            view=window.view,
            anchor=window.anchor,
            title=window.title(),
            range_start=range_start,
            range_end=range_end,
            min_time=window.min_time(),
            max_time=window.max_time(),
        )


class EventResponse(BaseModel):
    """One calendar event; `resource` is the underlying record."""

    id: int
    kind: str
    title: str
    label: str
    start: datetime
    end: datetime
    status: str | None = None
    display_status: str
    mechanic: str | None = None
    resource: dict

    @classmethod
    def from_event(cls, event: CalendarEvent, now: datetime) -> "EventResponse":
        return cls(
            id=event.id,
            kind=event.kind.value,
            title=event.title,
            label=event.label,
            start=event.start,
            end=event.end,
            status=event.status,
            display_status=display_status(event.status, event.start, event.end, now),
            mechanic=event.mechanic_name,
            resource=record_body(event.resource),
        )


class ScheduleViewResponse(BaseModel):
    """Unified schedule for one caller."""

    events: list[EventResponse]
    read_only: bool
    notifications: list[Notification] = []
    window: WindowResponse | None = None
    active_filters: int = 0
    status_counts: dict[str, int] = {}

    @classmethod
    def from_view(
        cls, view: ScheduleView, now: datetime, active_filters: int = 0
    ) -> "ScheduleViewResponse":
        return cls(
            events=[EventResponse.from_event(event, now) for event in view.events],
            read_only=view.read_only,
            notifications=view.notifications,
            window=WindowResponse.from_window(view.window) if view.window else None,
            active_filters=active_filters,
            status_counts=status_counts(event.status for event in view.events),
        )


class DurationCheckResponse(BaseModel):
    valid: bool
    code: str | None = None
    message: str | None = None


class TransitionCheckResponse(BaseModel):
    allowed: bool
    code: str | None = None
    message: str | None = None
