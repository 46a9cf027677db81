"""Schedule endpoints: unified calendar view, navigation and Excel export."""

import asyncio
from datetime import date, datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from api.dependencies import get_caller, get_coordinator, verify_api_key
from api.logging import RequestLog, tracked_request
from api.models.responses import ScheduleViewResponse, WindowResponse
from core.config import WORKSHOP_TIMEZONE
from models.events import CallerIdentity, ScheduleFilter, ScheduleView, ViewWindow
from services.filters import active_filter_count
from services.reports import report_filename, schedule_report_to_bytes
from services.scheduling import SchedulingCoordinator, go_to_today, navigate

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])

ScheduleViewName = Literal["day", "week", "month", "all"]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def schedule_filter_params(
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    client_id: int | None = None,
    mechanic_id: int | None = None,
    service_id: int | None = None,
    car_id: int | None = None,
    status: str | None = None,
) -> ScheduleFilter:
    return ScheduleFilter(
        date_from=date_from,
        date_to=date_to,
        client_id=client_id,
        mechanic_id=mechanic_id,
        service_id=service_id,
        car_id=car_id,
        status=status,
    )


def build_window(
    view: ScheduleViewName, anchor: date | None, coordinator: SchedulingCoordinator
) -> ViewWindow | None:
    """Window for the query; 'all' means no window, a missing date means today."""
    if view == "all":
        return None
    return ViewWindow(view=view, anchor=anchor or coordinator.clock().date())


async def _load(
    coordinator: SchedulingCoordinator,
    caller: CallerIdentity,
    schedule_filter: ScheduleFilter,
    search: str,
    window: ViewWindow | None,
    request_log: RequestLog,
) -> ScheduleView:
    schedule = await coordinator.load_view(caller, schedule_filter, search, window, with_references=True)
    request_log.events_returned = len(schedule.events)
    for notification in schedule.notifications:
        detail_type = "warning" if notification.severity == "warning" else "notification"
        request_log.details.append((detail_type, notification.message))
    return schedule


@router.get("/schedule", response_model=ScheduleViewResponse)
async def get_schedule(
    request: Request,
    view: ScheduleViewName = "week",
    anchor: date | None = Query(None, alias="date", description="Anchor date (YYYY-MM-DD), default today"),
    search: str = "",
    schedule_filter: ScheduleFilter = Depends(schedule_filter_params),
    caller: CallerIdentity = Depends(get_caller),
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """
    Unified reservations + repair jobs timeline for the caller.

    Collections that fail to load come back empty with an error
    notification; the rest of the view still renders.
    """
    with tracked_request(request, role=caller.role.value, user_id=caller.user_id) as request_log:
        window = build_window(view, anchor, coordinator)
        schedule = await _load(coordinator, caller, schedule_filter, search, window, request_log)
        return ScheduleViewResponse.from_view(
            schedule, now=coordinator.clock(), active_filters=active_filter_count(schedule_filter)
        )


@router.get("/schedule/navigate", response_model=WindowResponse)
async def navigate_schedule(
    request: Request,
    view: Literal["day", "week", "month"] = "week",
    anchor: date | None = Query(None, alias="date"),
    direction: Literal["prev", "next", "today"] = "next",
):
    """Window one day/week/month away from the given one, or today's."""
    with tracked_request(request):
        today = datetime.now(WORKSHOP_TIMEZONE).date()
        window = ViewWindow(view=view, anchor=anchor or today)
        if direction == "today":
            window = go_to_today(window, today)
        else:
            window = navigate(window, direction)
        return WindowResponse.from_window(window)


@router.get("/schedule/export")
async def export_schedule(
    request: Request,
    view: ScheduleViewName = "week",
    anchor: date | None = Query(None, alias="date"),
    search: str = "",
    schedule_filter: ScheduleFilter = Depends(schedule_filter_params),
    caller: CallerIdentity = Depends(get_caller),
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """Excel workbook of the same view GET /v1/schedule returns."""
    with tracked_request(request, role=caller.role.value, user_id=caller.user_id) as request_log:
        window = build_window(view, anchor, coordinator)
        schedule = await _load(coordinator, caller, schedule_filter, search, window, request_log)

        # openpyxl is synchronous
        excel_bytes = await asyncio.to_thread(schedule_report_to_bytes, schedule)

        return Response(
            content=excel_bytes,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{report_filename(schedule)}"'},
        )
