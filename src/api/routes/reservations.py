"""Reservation endpoints."""

from fastapi import APIRouter, Depends, Request, Response, status

from api.dependencies import get_caller, get_coordinator, verify_api_key
from api.errors import http_error
from api.logging import RequestLog, tracked_request
from api.models.responses import ErrorCodes, record_body
from core.errors import NotFoundError
from models.events import CallerIdentity
from models.records import Reservation
from models.requests import CreateReservationRequest, ReservationUpdate
from services.scheduling import SchedulingCoordinator

router = APIRouter(prefix="/v1/reservations", dependencies=[Depends(verify_api_key)])


async def load_visible_reservation(
    coordinator: SchedulingCoordinator, caller: CallerIdentity, reservation_id: int
) -> Reservation:
    """Stored reservation, or NotFoundError when it is outside the caller's scope."""
    reservation = await coordinator.store.get_reservation(reservation_id)
    if not await coordinator.is_visible(caller, reservation):
        raise NotFoundError(f"Reservation {reservation_id} not found")
    return reservation


def _log_caller(caller: CallerIdentity, reservation_id: int | None = None) -> dict:
    return {"role": caller.role.value, "user_id": caller.user_id, "record_id": reservation_id}


def _collect_notifications(coordinator: SchedulingCoordinator, request_log: RequestLog) -> None:
    coordinator.notify = lambda title, message, severity: request_log.details.append(("notification", message))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_reservation(
    request: Request,
    body: CreateReservationRequest,
    caller: CallerIdentity = Depends(get_caller),
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """
    Book a reservation for an existing client or register a new one.

    Duration is validated (30 minutes to 2 hours) before anything is stored.
    """
    with tracked_request(request, **_log_caller(caller)) as request_log:
        reservation = await coordinator.create_reservation(caller, body)
        request_log.record_id = reservation.id
        request_log.status_code = status.HTTP_201_CREATED
        return record_body(reservation)


@router.get("/{reservation_id}")
async def get_reservation(
    request: Request,
    reservation_id: int,
    caller: CallerIdentity = Depends(get_caller),
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    with tracked_request(request, **_log_caller(caller, reservation_id)) as request_log:
        _collect_notifications(coordinator, request_log)
        reservation = await coordinator.get_reservation_detail(reservation_id)
        if reservation is None:
            if request_log.details:
                raise http_error(
                    status.HTTP_502_BAD_GATEWAY,
                    request_log.details[0][1],
                    ErrorCodes.TRANSPORT_ERROR,
                )
            raise http_error(
                status.HTTP_404_NOT_FOUND, f"Reservation {reservation_id} not found", ErrorCodes.NOT_FOUND
            )
        if not await coordinator.is_visible(caller, reservation):
            raise NotFoundError(f"Reservation {reservation_id} not found")
        return record_body(reservation)


@router.put("/{reservation_id}")
async def update_reservation(
    request: Request,
    reservation_id: int,
    body: ReservationUpdate,
    caller: CallerIdentity = Depends(get_caller),
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """Staff edit; send `version` to have concurrent edits rejected with 409."""
    with tracked_request(request, **_log_caller(caller, reservation_id)):
        reservation = await load_visible_reservation(coordinator, caller, reservation_id)
        updated = await coordinator.update_reservation(caller, reservation, body)
        return record_body(updated)


@router.post("/{reservation_id}/cancel")
async def cancel_reservation(
    request: Request,
    reservation_id: int,
    caller: CallerIdentity = Depends(get_caller),
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """Set status to cancelled; the reservation is kept."""
    with tracked_request(request, **_log_caller(caller, reservation_id)):
        reservation = await load_visible_reservation(coordinator, caller, reservation_id)
        cancelled = await coordinator.cancel_reservation(caller, reservation)
        return record_body(cancelled)


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    request: Request,
    reservation_id: int,
    caller: CallerIdentity = Depends(get_caller),
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    with tracked_request(request, **_log_caller(caller, reservation_id)) as request_log:
        await coordinator.delete_reservation(caller, reservation_id)
        request_log.status_code = status.HTTP_204_NO_CONTENT
        return Response(status_code=status.HTTP_204_NO_CONTENT)
