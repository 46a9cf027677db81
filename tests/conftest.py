"""
Pytest configuration and shared fixtures.
"""

import asyncio
import os
import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Pin settings before any src module reads them
os.environ["WORKSHOP_TIMEZONE"] = "UTC"
os.environ["WORKSHOP_API_KEY"] = "test-api-key"
os.environ["WORKSHOP_DB_PATH"] = str(Path(tempfile.mkdtemp()) / "workshop-api.db")

# Add src (and tests, for fixtures.*) to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from core.errors import NotFoundError
from core.lifecycle import Role
from models.events import CallerIdentity
from models.records import Car, Client, Mechanic, RepairJob, Reservation, Service

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


# =============================================================================
# IN-MEMORY DATA STORE
# =============================================================================


class InMemoryDataStore:
    """
    DataStore double backed by dicts.

    `failures` maps an operation name to the exception it raises; `gates`
    maps an operation name to an asyncio.Event the next call waits on.
    Every write bumps the record version.
    """

    def __init__(
        self,
        reservations=(),
        repair_jobs=(),
        clients=(),
        mechanics=(),
        services=(),
        cars=(),
    ):
        self.reservations = {r.id: r for r in reservations}
        self.repair_jobs = {j.id: j for j in repair_jobs}
        self.clients = {c.id: c for c in clients}
        self.mechanics = {m.id: m for m in mechanics}
        self.services = {s.id: s for s in services}
        self.cars = {c.id: c for c in cars}
        self.failures: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.waiting = asyncio.Event()
        self.calls: list[str] = []
        self._next_id = 1000

    async def _enter(self, operation: str):
        self.calls.append(operation)
        gate = self.gates.pop(operation, None)
        if gate is not None:
            self.waiting.set()
            await gate.wait()
        if operation in self.failures:
            raise self.failures[operation]

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    @property
    def writes(self) -> list[str]:
        return [call for call in self.calls if call.split("_")[0] in ("create", "update", "delete")]

    def _get(self, table: dict, record_id: int, label: str):
        if record_id not in table:
            raise NotFoundError(f"{label} {record_id} not found")
        return table[record_id]

    def _store(self, table: dict, record_id: int, record):
        current = table.get(record_id)
        version = (current.version or 0) + 1 if current is not None else 1
        stored = record.model_copy(update={"id": record_id, "version": version})
        table[record_id] = stored
        return stored

    # Reservations

    async def list_reservations(self):
        await self._enter("list_reservations")
        return list(self.reservations.values())

    async def get_reservation(self, reservation_id):
        await self._enter("get_reservation")
        return self._get(self.reservations, reservation_id, "Reservation")

    async def create_reservation(self, reservation):
        await self._enter("create_reservation")
        return self._store(self.reservations, self._new_id(), reservation)

    async def update_reservation(self, reservation_id, reservation):
        await self._enter("update_reservation")
        self._get(self.reservations, reservation_id, "Reservation")
        return self._store(self.reservations, reservation_id, reservation)

    async def delete_reservation(self, reservation_id):
        await self._enter("delete_reservation")
        self._get(self.reservations, reservation_id, "Reservation")
        del self.reservations[reservation_id]

    # Repair jobs

    async def list_repair_jobs(self):
        await self._enter("list_repair_jobs")
        return list(self.repair_jobs.values())

    async def get_repair_job(self, job_id):
        await self._enter("get_repair_job")
        return self._get(self.repair_jobs, job_id, "Repair job")

    async def create_repair_job(self, job):
        await self._enter("create_repair_job")
        return self._store(self.repair_jobs, self._new_id(), job)

    async def update_repair_job(self, job_id, job):
        await self._enter("update_repair_job")
        self._get(self.repair_jobs, job_id, "Repair job")
        return self._store(self.repair_jobs, job_id, job)

    async def delete_repair_job(self, job_id):
        await self._enter("delete_repair_job")
        self._get(self.repair_jobs, job_id, "Repair job")
        del self.repair_jobs[job_id]

    # Reference lists

    async def list_clients(self):
        await self._enter("list_clients")
        return list(self.clients.values())

    async def create_client(self, client):
        await self._enter("create_client")
        return self._store(self.clients, self._new_id(), client)

    async def list_mechanics(self):
        await self._enter("list_mechanics")
        return list(self.mechanics.values())

    async def list_services(self):
        await self._enter("list_services")
        return list(self.services.values())

    async def list_cars(self):
        await self._enter("list_cars")
        return list(self.cars.values())

    async def create_car(self, car):
        await self._enter("create_car")
        return self._store(self.cars, self._new_id(), car)


# =============================================================================
# SAMPLE RECORDS
# =============================================================================


@pytest.fixture
def clients():
    return [
        Client(id=1, name="Alice Johnson", phone="555-0101", email="alice@example.com"),
        Client(id=2, name="Bob Smith", phone="555-0102", email="bob@example.com"),
    ]


@pytest.fixture
def mechanics():
    return [
        Mechanic(id=10, name="Mike Torres", email="mike@workshop.test", specialty="Engines"),
        Mechanic(id=11, name="Sara Lee", email="Sara@Workshop.test", specialty="Brakes"),
    ]


@pytest.fixture
def services():
    return [
        Service(id=100, service_name="Oil Change", estimated_duration=30),
        Service(id=101, service_name="Engine Repair", estimated_duration=240),
    ]


@pytest.fixture
def cars():
    return [
        Car(id=50, make="Toyota", model="Corolla", owner_id=1),
        Car(id=51, make="Honda", model="Civic", owner_id=2),
    ]


@pytest.fixture
def reservations():
    """Reservations as the Data Store returns them (wire names, embedded snapshots)."""
    return [
        Reservation.model_validate(
            {
                "id": 1,
                "client": {"id": 1, "name": "Alice Johnson"},
                "car": {"id": 50, "make": "Toyota", "model": "Corolla"},
                "mechanic": {"id": 10, "name": "Mike Torres", "email": "mike@workshop.test"},
                "service": {"id": 100, "serviceName": "Oil Change"},
                "visitDateTime": "2024-01-10T09:00:00Z",
                "endDateTime": "2024-01-10T10:00:00Z",
                "status": "confirmed",
                "version": 1,
            }
        ),
        Reservation.model_validate(
            {
                "id": 2,
                "client": {"id": 2, "name": "Bob Smith"},
                "car": {"id": 51, "make": "Honda", "model": "Civic"},
                "mechanic": {"id": 11, "name": "Sara Lee", "email": "sara@workshop.test"},
                "visitDateTime": "2024-01-10T14:00:00Z",
                "status": "unconfirmed",
                "version": 1,
            }
        ),
        Reservation.model_validate(
            {
                "id": 3,
                "clientId": 1,
                "carId": 50,
                "mechanicId": 11,
                "serviceId": 100,
                "visitDateTime": "2024-01-12T08:00:00Z",
                "endDateTime": "2024-01-12T09:00:00Z",
                "status": "cancelled",
                "version": 2,
            }
        ),
    ]


@pytest.fixture
def repair_jobs():
    return [
        RepairJob.model_validate(
            {
                "id": 1,
                "client": {"id": 2, "name": "Bob Smith"},
                "mechanic": {"id": 10, "name": "Mike Torres", "email": "mike@workshop.test"},
                "service": {"id": 101, "serviceName": "Engine Repair", "estimatedDuration": 240},
                "startDateTime": "2024-01-10T11:00:00Z",
                "status": "upcoming",
                "version": 1,
            }
        ),
        RepairJob.model_validate(
            {
                "id": 2,
                "client": {"id": 1, "name": "Alice Johnson"},
                "mechanic": {"id": 11, "name": "Sara Lee", "email": "sara@workshop.test"},
                "service": {"id": 101, "serviceName": "Engine Repair"},
                "startDateTime": "2024-01-09T08:00:00Z",
                "endDateTime": "2024-01-11T17:00:00Z",
                "status": "In Progress",
                "version": 3,
            }
        ),
    ]


@pytest.fixture
def store(reservations, repair_jobs, clients, mechanics, services, cars):
    return InMemoryDataStore(reservations, repair_jobs, clients, mechanics, services, cars)


# =============================================================================
# CALLERS
# =============================================================================


@pytest.fixture
def manager():
    return CallerIdentity(role=Role.MANAGER, user_id=900, email="boss@workshop.test")


@pytest.fixture
def mechanic_caller():
    return CallerIdentity(role=Role.MECHANIC, user_id=901, email="MIKE@workshop.test")


@pytest.fixture
def client_caller():
    return CallerIdentity(role=Role.CLIENT, user_id=1, email="alice@example.com")


@pytest.fixture
def clock():
    return lambda: NOW
