"""Pydantic request models for the booking check endpoints."""

from pydantic import BaseModel

from core.lifecycle import RecordKind, Role
from models.records import Instant


class DurationCheckRequest(BaseModel):
    start: Instant | None = None
    end: Instant | None = None


class TransitionCheckRequest(BaseModel):
    """`role` lets a manager check on behalf of another role; ignored for other callers."""

    kind: RecordKind
    current: str | None = None
    target: str
    role: Role | None = None
