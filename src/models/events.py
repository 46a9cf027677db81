"""
Schedule-side models: calendar events, filters, caller identity and view windows.

CalendarEvent values are derived per query and never persisted.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Callable, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.config import DAY_VIEW_END_HOUR, DAY_VIEW_START_HOUR, WORKSHOP_TIMEZONE
from core.lifecycle import RecordKind, Role
from models.records import Instant, RepairJob, Reservation

ViewName = Literal["day", "week", "month"]
Direction = Literal["prev", "next"]
Severity = Literal["success", "info", "warning", "error"]


class CalendarEvent(BaseModel):
    """Unified timeline entry for a reservation or a repair job."""

    model_config = ConfigDict(frozen=True)

    id: int
    kind: RecordKind
    title: str
    label: str  # "Reservation - Checkup" or "Repair Job - Engine Repair"
    start: datetime
    end: datetime
    status: str | None = None
    resource: Reservation | RepairJob

    @model_validator(mode="after")
    def check_order(self) -> "CalendarEvent":
        if not self.start < self.end:
            raise ValueError("event start must be before end")
        return self

    @property
    def mechanic_name(self) -> str | None:
        mechanic = self.resource.mechanic
        return mechanic.name if mechanic else None


class ScheduleFilter(BaseModel):
    """Structured schedule filter. Every field is optional; None means no constraint."""

    date_from: Instant | None = None
    date_to: Instant | None = None
    client_id: int | None = None
    mechanic_id: int | None = None
    service_id: int | None = None
    car_id: int | None = None
    status: str | None = None


class CallerIdentity(BaseModel):
    """
    Who is asking for the schedule.

    Mechanic records and session users live in different id spaces, so a
    mechanic is matched by email; `user_id` is the session user id (which is
    the client id for client callers).
    """

    role: Role
    user_id: int | None = None
    email: str | None = None


class Notification(BaseModel):
    """Non-fatal problem (or success) surfaced to the presentation layer."""

    title: str
    message: str
    severity: Severity = "info"


NotifyCallback = Callable[[str, str, str], None]


class ViewWindow(BaseModel):
    """Calendar window: a granularity plus the date it is anchored on."""

    model_config = ConfigDict(frozen=True)

    view: ViewName = "day"
    anchor: date

    def range(self) -> tuple[datetime, datetime]:
        """Start (inclusive) and end (exclusive) instants of the window."""
        if self.view == "day":
            first = self.anchor
            last = first + timedelta(days=1)
        elif self.view == "week":
            # Weeks start on Monday
            first = self.anchor - timedelta(days=self.anchor.weekday())
            last = first + timedelta(days=7)
        else:
            first = self.anchor.replace(day=1)
            days = calendar.monthrange(first.year, first.month)[1]
            last = first + timedelta(days=days)
        return (
            datetime.combine(first, time.min, tzinfo=WORKSHOP_TIMEZONE),
            datetime.combine(last, time.min, tzinfo=WORKSHOP_TIMEZONE),
        )

    def min_time(self) -> datetime | None:
        """Earliest time-of-day shown; only the day view is bounded."""
        if self.view != "day":
            return None
        return datetime.combine(self.anchor, time(DAY_VIEW_START_HOUR), tzinfo=WORKSHOP_TIMEZONE)

    def max_time(self) -> datetime | None:
        """Latest time-of-day shown; only the day view is bounded."""
        if self.view != "day":
            return None
        return datetime.combine(self.anchor, time(DAY_VIEW_END_HOUR), tzinfo=WORKSHOP_TIMEZONE)

    def title(self) -> str:
        """Header label, e.g. 'Wed, Jan 10', 'Jan 8 - Jan 14' or 'January 2024'."""
        if self.view == "day":
            return f"{self.anchor.strftime('%a, %b')} {self.anchor.day}"
        if self.view == "week":
            first = self.anchor - timedelta(days=self.anchor.weekday())
            last = first + timedelta(days=6)
            return f"{first.strftime('%b')} {first.day} - {last.strftime('%b')} {last.day}"
        return self.anchor.strftime("%B %Y")


class ScheduleView(BaseModel):
    """Result of one schedule load."""

    events: list[CalendarEvent] = Field(default_factory=list)
    read_only: bool = False
    notifications: list[Notification] = Field(default_factory=list)
    window: ViewWindow | None = None
    generation: int = 0
