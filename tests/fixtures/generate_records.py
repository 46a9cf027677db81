#!/usr/bin/env python3
"""
Generate a random but reproducible workshop dataset.

Used by the property tests; run directly to print the dataset as Data Store
JSON (handy for seeding a development backend).
"""

import json
import random
import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path

from faker import Faker

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from models.records import Car, Client, Mechanic, RepairJob, Reservation, Service

# Workshop services (name, estimated minutes)
SERVICES = [
    ("Oil Change", 30),
    ("Brake Inspection", 45),
    ("Tire Rotation", 40),
    ("Engine Repair", 480),
    ("Transmission Service", 240),
    ("Diagnostics", None),
]

CARS = {
    "Toyota": ["Corolla", "Camry", "RAV4"],
    "Honda": ["Civic", "Accord", "CR-V"],
    "Ford": ["Focus", "F-150", None],
    "Mazda": ["MX-5", "CX-5"],
}

RESERVATION_STATUSES = ["unconfirmed", "confirmed", "Confirmed", "cancelled", "completed"]
REPAIR_JOB_STATUSES = ["upcoming", "in_progress", "In Progress", "in-progress", "completed", "cancelled"]

# Dataset spans four weeks from here
BASE_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)


@dataclass
class Dataset:
    clients: list[Client] = field(default_factory=list)
    mechanics: list[Mechanic] = field(default_factory=list)
    services: list[Service] = field(default_factory=list)
    cars: list[Car] = field(default_factory=list)
    reservations: list[Reservation] = field(default_factory=list)
    repair_jobs: list[RepairJob] = field(default_factory=list)


def random_start(rng: random.Random) -> datetime:
    """Quarter-hour slot between 07:00 and 18:45 within the four weeks."""
    day = rng.randrange(28)
    minutes = rng.randrange(7 * 60, 19 * 60, 15)
    return BASE_DATE + timedelta(days=day, minutes=minutes)


def maybe(rng: random.Random, value, probability: float = 0.8):
    """Value or None, to exercise missing associations."""
    return value if rng.random() < probability else None


def generate_dataset(
    seed: int = 0, num_clients: int = 8, num_mechanics: int = 4, num_reservations: int = 40, num_jobs: int = 15
) -> Dataset:
    """Build a dataset; the same seed always gives the same records."""
    rng = random.Random(seed)
    fake = Faker()
    fake.seed_instance(seed)

    data = Dataset()
    for client_id in range(1, num_clients + 1):
        data.clients.append(
            Client(id=client_id, name=fake.name(), phone=fake.phone_number(), email=fake.email())
        )
    for mechanic_id in range(1, num_mechanics + 1):
        data.mechanics.append(
            Mechanic(
                id=100 + mechanic_id,
                name=fake.name(),
                email=fake.unique.email(),
                experience=rng.randint(1, 25),
            )
        )
    for service_id, (name, minutes) in enumerate(SERVICES, start=200):
        data.services.append(Service(id=service_id, service_name=name, estimated_duration=minutes))
    for car_id, client in enumerate(data.clients, start=300):
        make = rng.choice(list(CARS))
        data.cars.append(
            Car(id=car_id, make=make, model=rng.choice(CARS[make]), year=rng.randint(2005, 2024), owner_id=client.id)
        )

    for reservation_id in range(1, num_reservations + 1):
        client = rng.choice(data.clients)
        car = next(car for car in data.cars if car.owner_id == client.id)
        mechanic = maybe(rng, rng.choice(data.mechanics))
        service = maybe(rng, rng.choice(data.services))
        start = maybe(rng, random_start(rng), 0.95)
        end = None
        if start is not None and rng.random() < 0.7:
            end = start + timedelta(minutes=rng.choice([-30, 30, 45, 60, 90, 120, 180]))
        data.reservations.append(
            Reservation(
                id=reservation_id,
                client_id=client.id,
                car_id=car.id,
                mechanic_id=mechanic.id if mechanic else None,
                service_id=service.id if service else None,
                # Snapshots are embedded for some records only
                client=maybe(rng, client, 0.6),
                car=maybe(rng, car, 0.6),
                mechanic=maybe(rng, mechanic, 0.6) if mechanic else None,
                service=maybe(rng, service, 0.6) if service else None,
                visit_start=start,
                visit_end=end,
                status=rng.choice(RESERVATION_STATUSES),
                version=1,
            )
        )

    for job_id in range(1, num_jobs + 1):
        client = rng.choice(data.clients)
        mechanic = maybe(rng, rng.choice(data.mechanics))
        service = maybe(rng, rng.choice(data.services))
        start = maybe(rng, random_start(rng), 0.9)
        end = None
        if start is not None and rng.random() < 0.5:
            end = start + timedelta(hours=rng.choice([-1, 2, 8, 30, 72]))
        data.repair_jobs.append(
            RepairJob(
                id=job_id,
                client_id=client.id,
                mechanic_id=mechanic.id if mechanic else None,
                service_id=service.id if service else None,
                client=maybe(rng, client, 0.6),
                mechanic=maybe(rng, mechanic, 0.6) if mechanic else None,
                service=maybe(rng, service, 0.6) if service else None,
                start=start,
                end=end,
                status=rng.choice(REPAIR_JOB_STATUSES),
                version=1,
            )
        )

    return data


if __name__ == "__main__":
    dataset = generate_dataset()
    print(
        json.dumps(
            {
                "reservations": [r.to_wire() | {"id": r.id} for r in dataset.reservations],
                "repairJobs": [j.to_wire() | {"id": j.id} for j in dataset.repair_jobs],
            },
            indent=2,
        )
    )
