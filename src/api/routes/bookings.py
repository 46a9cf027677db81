"""Stateless booking checks used by booking forms before they submit."""

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_caller, verify_api_key
from api.logging import tracked_request
from api.models.requests import DurationCheckRequest, TransitionCheckRequest
from api.models.responses import DurationCheckResponse, TransitionCheckResponse
from core.errors import ValidationError
from core.lifecycle import Role, check_transition
from core.validation import validate_duration
from models.events import CallerIdentity

router = APIRouter(prefix="/v1/bookings", dependencies=[Depends(verify_api_key)])


@router.post("/validate-duration", response_model=DurationCheckResponse)
async def validate_booking_duration(request: Request, body: DurationCheckRequest):
    """Reservation duration rule; a draft without both times is valid."""
    with tracked_request(request):
        error = validate_duration(body.start, body.end)
        if error is None:
            return DurationCheckResponse(valid=True)
        return DurationCheckResponse(valid=False, code=error.code, message=error.message)


@router.post("/can-transition", response_model=TransitionCheckResponse)
async def can_transition_status(
    request: Request,
    body: TransitionCheckRequest,
    caller: CallerIdentity = Depends(get_caller),
):
    """
    Whether the role may move a record from `current` to `target`.

    Managers may ask on behalf of another role; everyone else is checked as
    themselves.
    """
    role = caller.role
    if caller.role == Role.MANAGER and body.role is not None:
        role = body.role
    with tracked_request(request, role=role.value, user_id=caller.user_id):
        try:
            check_transition(role, body.kind, body.current, body.target)
        except ValidationError as e:
            return TransitionCheckResponse(allowed=False, code=e.code, message=e.message)
        return TransitionCheckResponse(allowed=True)
