"""
Data Store boundary: the REST backend that owns every workshop record.

`DataStore` is the protocol the scheduling code depends on. `HttpDataStore`
implements it over HTTP with httpx and turns every failure into a
TransportError (or NotFoundError for 404s).
"""

from typing import Any, Protocol, TypeVar

import httpx
import pydantic
from pydantic import BaseModel

from core.errors import NotFoundError, TransportError
from models.records import Car, Client, Mechanic, RepairJob, Reservation, Service

Model = TypeVar("Model", bound=BaseModel)


class DataStore(Protocol):
    """Async read/write operations the scheduling core needs."""

    async def list_reservations(self) -> list[Reservation]: ...

    async def get_reservation(self, reservation_id: int) -> Reservation: ...

    async def create_reservation(self, reservation: Reservation) -> Reservation: ...

    async def update_reservation(self, reservation_id: int, reservation: Reservation) -> Reservation: ...

    async def delete_reservation(self, reservation_id: int) -> None: ...

    async def list_repair_jobs(self) -> list[RepairJob]: ...

    async def get_repair_job(self, job_id: int) -> RepairJob: ...

    async def create_repair_job(self, job: RepairJob) -> RepairJob: ...

    async def update_repair_job(self, job_id: int, job: RepairJob) -> RepairJob: ...

    async def delete_repair_job(self, job_id: int) -> None: ...

    async def list_clients(self) -> list[Client]: ...

    async def create_client(self, client: Client) -> Client: ...

    async def list_mechanics(self) -> list[Mechanic]: ...

    async def list_services(self) -> list[Service]: ...

    async def list_cars(self) -> list[Car]: ...

    async def create_car(self, car: Car) -> Car: ...


# =============================================================================
# ENDPOINTS
# =============================================================================

RESERVATIONS = "/api/reservations"
REPAIR_JOBS = "/api/repair-jobs"
CLIENTS = "/api/clients"
MECHANICS = "/api/mechanics"
SERVICES = "/api/services"
CARS = "/api/cars"


def _error_message(response: httpx.Response) -> str:
    """Pull a readable message out of an error response."""
    try:
        data = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:100] if text else f"HTTP Error: {response.status_code}"
    if isinstance(data, dict):
        return data.get("message") or data.get("error") or f"HTTP Error: {response.status_code}"
    return f"HTTP Error: {response.status_code}"


def _parse(endpoint: str, model: type[Model], item: Any) -> Model:
    """Validate one record; a record that doesn't fit the model is a bad response."""
    try:
        return model.model_validate(item)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or model.__name__
        raise TransportError(f"Malformed response from {endpoint}: {location}: {first['msg']}") from e


class HttpDataStore:
    """REST client for the workshop backend."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Basic {self.token}"
        return headers

    async def _request(self, method: str, endpoint: str, json: dict[str, Any] | None = None) -> Any:
        """
        Send one request and decode the body.

        Raises:
            NotFoundError: on 404
            TransportError: on any other non-2xx response or network failure
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, url, json=json, headers=self._headers())
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to reach data store at {url}: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(_error_message(response))
        if not response.is_success:
            raise TransportError(_error_message(response), status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            # DELETE answers with plain text such as "Deleted"
            return response.text

    async def _list(self, endpoint: str, model: type[Model]) -> list[Model]:
        data = await self._request("GET", endpoint)
        if not isinstance(data, list):
            raise TransportError(f"Unexpected response from {endpoint}: expected a list")
        return [_parse(endpoint, model, item) for item in data]

    async def _one(self, method: str, endpoint: str, model: type[Model], json: dict | None = None) -> Model:
        data = await self._request(method, endpoint, json=json)
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected response from {endpoint}: expected an object")
        return _parse(endpoint, model, data)

    # Reservations

    async def list_reservations(self) -> list[Reservation]:
        return await self._list(RESERVATIONS, Reservation)

    async def get_reservation(self, reservation_id: int) -> Reservation:
        return await self._one("GET", f"{RESERVATIONS}/{reservation_id}", Reservation)

    async def create_reservation(self, reservation: Reservation) -> Reservation:
        return await self._one("POST", f"{RESERVATIONS}/new", Reservation, reservation.to_wire())

    async def update_reservation(self, reservation_id: int, reservation: Reservation) -> Reservation:
        return await self._one(
            "PUT", f"{RESERVATIONS}/{reservation_id}", Reservation, reservation.to_wire()
        )

    async def delete_reservation(self, reservation_id: int) -> None:
        await self._request("DELETE", f"{RESERVATIONS}/{reservation_id}")

    # Repair jobs

    async def list_repair_jobs(self) -> list[RepairJob]:
        return await self._list(REPAIR_JOBS, RepairJob)

    async def get_repair_job(self, job_id: int) -> RepairJob:
        return await self._one("GET", f"{REPAIR_JOBS}/{job_id}", RepairJob)

    async def create_repair_job(self, job: RepairJob) -> RepairJob:
        return await self._one("POST", f"{REPAIR_JOBS}/new", RepairJob, job.to_wire())

    async def update_repair_job(self, job_id: int, job: RepairJob) -> RepairJob:
        return await self._one("PUT", f"{REPAIR_JOBS}/{job_id}", RepairJob, job.to_wire())

    async def delete_repair_job(self, job_id: int) -> None:
        await self._request("DELETE", f"{REPAIR_JOBS}/{job_id}")

    # Reference lists

    async def list_clients(self) -> list[Client]:
        return await self._list(CLIENTS, Client)

    async def create_client(self, client: Client) -> Client:
        return await self._one("POST", f"{CLIENTS}/new", Client, client.to_wire())

    async def list_mechanics(self) -> list[Mechanic]:
        return await self._list(MECHANICS, Mechanic)

    async def list_services(self) -> list[Service]:
        return await self._list(SERVICES, Service)

    async def list_cars(self) -> list[Car]:
        return await self._list(CARS, Car)

    async def create_car(self, car: Car) -> Car:
        return await self._one("POST", f"{CARS}/new", Car, car.to_wire())
