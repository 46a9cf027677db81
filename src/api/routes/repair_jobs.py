"""Repair job endpoints."""

from fastapi import APIRouter, Depends, Request, Response, status

from api.dependencies import get_caller, get_coordinator, verify_api_key
from api.errors import http_error
from api.logging import tracked_request
from api.models.responses import ErrorCodes, record_body
from core.errors import NotFoundError
from models.events import CallerIdentity
from models.records import RepairJob
from models.requests import CreateRepairJob, RepairJobUpdate
from services.scheduling import SchedulingCoordinator

router = APIRouter(prefix="/v1/repair-jobs", dependencies=[Depends(verify_api_key)])


async def load_visible_repair_job(
    coordinator: SchedulingCoordinator, caller: CallerIdentity, job_id: int
) -> RepairJob:
    job = await coordinator.store.get_repair_job(job_id)
    if not await coordinator.is_visible(caller, job):
        raise NotFoundError(f"Repair job {job_id} not found")
    return job


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_repair_job(
    request: Request,
    body: CreateRepairJob,
    caller: CallerIdentity = Depends(get_caller),
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """Staff only. Repair jobs have no duration ceiling, only start < end."""
    with tracked_request(request, role=caller.role.value, user_id=caller.user_id) as request_log:
        job = await coordinator.create_repair_job(caller, body)
        request_log.record_id = job.id
        request_log.status_code = status.HTTP_201_CREATED
        return record_body(job)


@router.get("/{job_id}")
async def get_repair_job(
    request: Request,
    job_id: int,
    caller: CallerIdentity = Depends(get_caller),
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    with tracked_request(
        request, role=caller.role.value, user_id=caller.user_id, record_id=job_id
    ) as request_log:
        coordinator.notify = lambda title, message, severity: request_log.details.append(
            ("notification", message)
        )
        job = await coordinator.get_repair_job_detail(job_id)
        if job is None:
            if request_log.details:
                raise http_error(
                    status.HTTP_502_BAD_GATEWAY, request_log.details[0][1], ErrorCodes.TRANSPORT_ERROR
                )
            raise http_error(status.HTTP_404_NOT_FOUND, f"Repair job {job_id} not found", ErrorCodes.NOT_FOUND)
        if not await coordinator.is_visible(caller, job):
            raise NotFoundError(f"Repair job {job_id} not found")
        return record_body(job)


@router.put("/{job_id}")
async def update_repair_job(
    request: Request,
    job_id: int,
    body: RepairJobUpdate,
    caller: CallerIdentity = Depends(get_caller),
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    with tracked_request(request, role=caller.role.value, user_id=caller.user_id, record_id=job_id):
        job = await load_visible_repair_job(coordinator, caller, job_id)
        updated = await coordinator.update_repair_job(caller, job, body)
        return record_body(updated)


@router.post("/{job_id}/cancel")
async def cancel_repair_job(
    request: Request,
    job_id: int,
    caller: CallerIdentity = Depends(get_caller),
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """Clients may cancel only while the job is upcoming."""
    with tracked_request(request, role=caller.role.value, user_id=caller.user_id, record_id=job_id):
        job = await load_visible_repair_job(coordinator, caller, job_id)
        cancelled = await coordinator.cancel_repair_job(caller, job)
        return record_body(cancelled)


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_repair_job(
    request: Request,
    job_id: int,
    caller: CallerIdentity = Depends(get_caller),
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    with tracked_request(
        request, role=caller.role.value, user_id=caller.user_id, record_id=job_id
    ) as request_log:
        await coordinator.delete_repair_job(caller, job_id)
        request_log.status_code = status.HTTP_204_NO_CONTENT
        return Response(status_code=status.HTTP_204_NO_CONTENT)
