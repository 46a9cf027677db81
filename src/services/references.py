"""
In-memory reference index for resolving record associations.

Records only carry foreign ids (plus whatever snapshot the Data Store
embedded). When a snapshot is missing, it is filled from the index instead
of following live object references.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Iterable

from models.events import CallerIdentity
from models.records import Car, Client, Mechanic, RepairJob, Reservation, Service
from services.data_store import DataStore


@dataclass
class ReferenceIndex:
    """Reference entities keyed by id."""

    clients: dict[int, Client] = field(default_factory=dict)
    mechanics: dict[int, Mechanic] = field(default_factory=dict)
    services: dict[int, Service] = field(default_factory=dict)
    cars: dict[int, Car] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        clients: Iterable[Client] = (),
        mechanics: Iterable[Mechanic] = (),
        services: Iterable[Service] = (),
        cars: Iterable[Car] = (),
    ) -> "ReferenceIndex":
        def by_id(items):
            return {item.id: item for item in items if item.id is not None}

        return cls(
            clients=by_id(clients),
            mechanics=by_id(mechanics),
            services=by_id(services),
            cars=by_id(cars),
        )


async def load_reference_index(store: DataStore) -> ReferenceIndex:
    """Fetch all reference lists concurrently."""
    clients, mechanics, services, cars = await asyncio.gather(
        store.list_clients(),
        store.list_mechanics(),
        store.list_services(),
        store.list_cars(),
    )
    return ReferenceIndex.build(clients, mechanics, services, cars)


def hydrate_reservation(reservation: Reservation, index: ReferenceIndex) -> Reservation:
    """Copy of the reservation with missing snapshots resolved from the index."""
    updates = {}
    if reservation.client is None and reservation.client_id in index.clients:
        updates["client"] = index.clients[reservation.client_id]
    if reservation.car is None and reservation.car_id in index.cars:
        updates["car"] = index.cars[reservation.car_id]
    if reservation.mechanic is None and reservation.mechanic_id in index.mechanics:
        updates["mechanic"] = index.mechanics[reservation.mechanic_id]
    if reservation.service is None and reservation.service_id in index.services:
        updates["service"] = index.services[reservation.service_id]
    return reservation.model_copy(update=updates) if updates else reservation


def hydrate_repair_job(job: RepairJob, index: ReferenceIndex) -> RepairJob:
    """Copy of the repair job with missing snapshots resolved from the index."""
    updates = {}
    if job.client is None and job.client_id in index.clients:
        updates["client"] = index.clients[job.client_id]
    if job.mechanic is None and job.mechanic_id in index.mechanics:
        updates["mechanic"] = index.mechanics[job.mechanic_id]
    if job.service is None and job.service_id in index.services:
        updates["service"] = index.services[job.service_id]
    return job.model_copy(update=updates) if updates else job


def mechanic_ids_for(caller: CallerIdentity, mechanics: list[Mechanic]) -> set[int]:
    """
    Map a session user to mechanic record ids by email.

    Session user ids and mechanic ids are different id spaces; the email
    (the session username) is the only shared key.
    """
    if not caller.email:
        return set()
    email = caller.email.strip().lower()
    return {
        mechanic.id
        for mechanic in mechanics
        if mechanic.id is not None and mechanic.email and mechanic.email.strip().lower() == email
    }
