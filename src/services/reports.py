"""
Excel schedule reports.
"""

from collections import defaultdict
from datetime import date, datetime
from io import BytesIO
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from core.config import SCHEDULE_HEADERS, WORKLOAD_HEADERS, WORKSHOP_TIMEZONE
from core.lifecycle import CANCELLED, RecordKind, normalize_status
from models.events import CalendarEvent, ScheduleView

UNASSIGNED = "Unassigned"


def format_date_display(d: date) -> str:
    """Format date as M/D/YYYY (platform-safe, no zero-padding)."""
    return f"{d.month}/{d.day}/{d.year}"


def format_time_display(dt: datetime) -> str:
    """Format time as HH:MM in the workshop timezone."""
    return dt.astimezone(WORKSHOP_TIMEZONE).strftime("%H:%M")


def mechanic_workload(events: list[CalendarEvent]) -> dict[str, dict[str, int]]:
    """
    Count events per mechanic from the loaded records.

    Returns:
        mechanic name -> {"reservations", "repair_jobs", "cancelled"}
    """
    workload: dict[str, dict[str, int]] = defaultdict(
        lambda: {"reservations": 0, "repair_jobs": 0, "cancelled": 0}
    )
    for event in events:
        counts = workload[event.mechanic_name or UNASSIGNED]
        if event.kind == RecordKind.RESERVATION:
            counts["reservations"] += 1
        else:
            counts["repair_jobs"] += 1
        if normalize_status(event.status) == CANCELLED:
            counts["cancelled"] += 1
    return dict(workload)


def write_schedule_sheet(ws, events: list[CalendarEvent]):
    """
    Write the unified timeline, one event per row.

    Headers: Date, Start, End, Type, Title, Label, Status, Mechanic
    """
    for col_idx, header in enumerate(SCHEDULE_HEADERS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)

    for row_idx, event in enumerate(events, start=2):
        local_start = event.start.astimezone(WORKSHOP_TIMEZONE)
        row_data = [
            format_date_display(local_start.date()),
            format_time_display(event.start),
            format_time_display(event.end),
            "Reservation" if event.kind == RecordKind.RESERVATION else "Repair Job",
            event.title,
            event.label,
            event.status or "",
            event.mechanic_name or UNASSIGNED,
        ]
        for col_idx, value in enumerate(row_data, start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)


def write_workload_sheet(ws, workload: dict[str, dict[str, int]]):
    """
    Write per-mechanic counts with a formula Total column.

    Headers: Mechanic, Reservations, Repair Jobs, Cancelled, Total
    Total = Reservations + Repair Jobs
    """
    for col_idx, header in enumerate(WORKLOAD_HEADERS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)

    for row_idx, mechanic in enumerate(sorted(workload), start=2):
        counts = workload[mechanic]
        ws.cell(row=row_idx, column=1, value=mechanic)
        ws.cell(row=row_idx, column=2, value=counts["reservations"])
        ws.cell(row=row_idx, column=3, value=counts["repair_jobs"])
        ws.cell(row=row_idx, column=4, value=counts["cancelled"])
        ws.cell(row=row_idx, column=5, value=f"=B{row_idx}+C{row_idx}")

    # Totals row
    last_row = len(workload) + 1
    total_row = last_row + 1
    ws.cell(row=total_row, column=1, value="Total").font = Font(bold=True)
    for col in range(2, len(WORKLOAD_HEADERS) + 1):
        letter = get_column_letter(col)
        ws.cell(row=total_row, column=col, value=f"=SUM({letter}2:{letter}{last_row})")


def create_schedule_workbook(view: ScheduleView) -> Workbook:
    """
    Build the schedule report workbook.

    Sheet 1: "Schedule" - the view's events in timeline order
    Sheet 2: "Mechanic Workload" - counts per mechanic
    """
    wb = Workbook()

    ws_schedule = wb.active
    ws_schedule.title = "Schedule"
    write_schedule_sheet(ws_schedule, view.events)

    ws_workload = wb.create_sheet(title="Mechanic Workload")
    write_workload_sheet(ws_workload, mechanic_workload(view.events))

    return wb


def schedule_report_to_bytes(view: ScheduleView) -> bytes:
    buffer = BytesIO()
    create_schedule_workbook(view).save(buffer)
    return buffer.getvalue()


def save_schedule_report(view: ScheduleView, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    create_schedule_workbook(view).save(str(output_path))
    return output_path


def report_filename(view: ScheduleView) -> str:
    """e.g. schedule_week_2024_01_08.xlsx"""
    if view.window is None:
        return "schedule_all.xlsx"
    first, _ = view.window.range()
    return f"schedule_{view.window.view}_{first.strftime('%Y_%m_%d')}.xlsx"
