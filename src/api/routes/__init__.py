"""API route modules."""

from .bookings import router as bookings_router
from .health import router as health_router
from .repair_jobs import router as repair_jobs_router
from .reservations import router as reservations_router
from .schedule import router as schedule_router

__all__ = [
    "health_router",
    "schedule_router",
    "bookings_router",
    "reservations_router",
    "repair_jobs_router",
]
