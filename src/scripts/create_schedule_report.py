#!/usr/bin/env python3
"""
Create an Excel schedule report from the workshop Data Store.

Loads the role-scoped schedule for one day/week/month window and writes a
workbook with the timeline and the per-mechanic workload.

Usage:
    python src/scripts/create_schedule_report.py --date 2024-01-10 --view week
    python src/scripts/create_schedule_report.py --role mechanic --email mike@example.com
"""

import argparse
import asyncio
import sys
import traceback
from datetime import datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import OUTPUT_DIR, WORKSHOP_TIMEZONE
from core.lifecycle import Role
from core.store_client import get_data_store
from models.events import CallerIdentity, ViewWindow
from services.reports import mechanic_workload, report_filename, save_schedule_report
from services.scheduling import SchedulingCoordinator


def print_notification(title: str, message: str, severity: str):
    print(f"  [{severity}] {title}: {message}")


def parse_window(date_str: str | None, view: str) -> ViewWindow:
    """Window anchored on the given date (YYYY-MM-DD), or today."""
    if date_str:
        anchor = datetime.strptime(date_str, "%Y-%m-%d").date()
    else:
        anchor = datetime.now(WORKSHOP_TIMEZONE).date()
    return ViewWindow(view=view, anchor=anchor)


async def main(
    date_str: str | None = None,
    view: str = "week",
    role: str = "manager",
    email: str | None = None,
    user_id: int | None = None,
):
    """Main entry point."""
    try:
        # 1. Resolve window and caller
        window = parse_window(date_str, view)
        caller = CallerIdentity(role=Role(role), user_id=user_id, email=email)
        first, last = window.range()
        print(f"Generating {view} schedule for {window.title()} ({first.date()} to {last.date()})")

        # 2. Load the schedule
        coordinator = SchedulingCoordinator(get_data_store(), notify=print_notification)
        print("Loading schedule and reference data...")
        schedule = await coordinator.load_view(caller, window=window, with_references=True)
        print(f"Events in window: {len(schedule.events)}")

        workload = mechanic_workload(schedule.events)
        for mechanic, counts in sorted(workload.items()):
            print(
                f"  {mechanic}: {counts['reservations']} reservation(s), "
                f"{counts['repair_jobs']} repair job(s), {counts['cancelled']} cancelled"
            )

        # 3. Generate Excel file
        output_path = OUTPUT_DIR / "reports" / "schedule" / report_filename(schedule)
        save_schedule_report(schedule, output_path)
        print(f"Saved Excel report to: {output_path}")

        print("\nDone!")

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate Excel schedule report")
    parser.add_argument("--date", help="Anchor date (YYYY-MM-DD). Defaults to today.")
    parser.add_argument("--view", choices=["day", "week", "month"], default="week")
    parser.add_argument("--role", choices=[r.value for r in Role], default="manager")
    parser.add_argument("--email", help="Caller email (mechanic schedules are matched by email)")
    parser.add_argument("--user-id", type=int, help="Caller user id (client schedules)")
    args = parser.parse_args()

    asyncio.run(main(args.date, args.view, args.role, args.email, args.user_id))
