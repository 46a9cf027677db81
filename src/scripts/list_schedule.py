#!/usr/bin/env python3
"""
Print the unified reservations + repair jobs timeline from the Data Store.

Usage:
    python src/scripts/list_schedule.py
    python src/scripts/list_schedule.py --role client --user-id 12 --search civic
"""

import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import WORKSHOP_TIMEZONE
from core.lifecycle import Role, display_status
from core.store_client import get_data_store
from models.events import CallerIdentity, ScheduleFilter
from services.scheduling import SchedulingCoordinator


def print_notification(title: str, message: str, severity: str):
    print(f"[{severity}] {title}: {message}")


async def main(role: str, user_id: int | None, email: str | None, search: str, status: str | None):
    """List every event visible to the caller."""
    caller = CallerIdentity(role=Role(role), user_id=user_id, email=email)
    coordinator = SchedulingCoordinator(get_data_store(), notify=print_notification)

    print("Fetching schedule from data store...\n")
    schedule = await coordinator.load_view(caller, ScheduleFilter(status=status), search, with_references=True)
    now = datetime.now(WORKSHOP_TIMEZONE)

    print(f"Found {len(schedule.events)} events" + (" (read-only)" if schedule.read_only else ""))
    print("=" * 80)

    current_day = None
    for event in schedule.events:
        local_start = event.start.astimezone(WORKSHOP_TIMEZONE)
        if local_start.date() != current_day:
            current_day = local_start.date()
            print(f"\n{current_day.strftime('%A, %B %d %Y')}")
            print("-" * 80)
        local_end = event.end.astimezone(WORKSHOP_TIMEZONE)
        print(f"  {local_start:%H:%M}-{local_end:%H:%M}  {event.label}")
        print(f"    {event.title}")
        print(f"    Status: {display_status(event.status, event.start, event.end, now)}")
        if event.mechanic_name:
            print(f"    Mechanic: {event.mechanic_name}")

    print("\nDone!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="List the workshop schedule")
    parser.add_argument("--role", choices=[r.value for r in Role], default="manager")
    parser.add_argument("--user-id", type=int)
    parser.add_argument("--email")
    parser.add_argument("--search", default="")
    parser.add_argument("--status")
    args = parser.parse_args()

    asyncio.run(main(args.role, args.user_id, args.email, args.search, args.status))
