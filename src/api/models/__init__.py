"""API Pydantic models."""

from .requests import DurationCheckRequest, TransitionCheckRequest
from .responses import (
    DurationCheckResponse,
    ErrorCodes,
    ErrorResponse,
    EventResponse,
    HealthResponse,
    ScheduleViewResponse,
    TransitionCheckResponse,
    WindowResponse,
)

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    "ErrorCodes",
    "EventResponse",
    "WindowResponse",
    "ScheduleViewResponse",
    "DurationCheckRequest",
    "DurationCheckResponse",
    "TransitionCheckRequest",
    "TransitionCheckResponse",
]
