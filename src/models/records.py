"""
Data Store records: reservations, repair jobs and their reference entities.

Records are flat: each association is a foreign id plus an optional
denormalized snapshot as returned by the Data Store. Nothing holds a live
back-reference, associations are resolved through services.references.
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from core.config import WORKSHOP_TIMEZONE


def ensure_aware(value: datetime) -> datetime:
    """Interpret naive timestamps in the workshop timezone."""
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=WORKSHOP_TIMEZONE)
    return value


Instant = Annotated[datetime, AfterValidator(ensure_aware)]


class WireModel(BaseModel):
    """Base for models exchanged with the Data Store (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# REFERENCE ENTITIES
# =============================================================================


class Client(WireModel):
    id: int | None = None
    name: str | None = None
    phone: str | None = None
    email: str | None = None


class Mechanic(WireModel):
    id: int | None = None
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    specialty: str | None = None
    experience: int | None = None


class Service(WireModel):
    id: int | None = None
    service_name: str | None = None
    description: str | None = None
    price: float | None = None
    estimated_duration: int | None = None  # minutes


class Car(WireModel):
    id: int | None = None
    make: str | None = None
    model: str | None = None
    year: int | None = None
    license_plate: str | None = None
    owner_id: int | None = None

    @model_validator(mode="before")
    @classmethod
    def owner_from_snapshot(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("ownerId") is None and data.get("owner_id") is None:
            owner = data.get("owner")
            if isinstance(owner, dict) and owner.get("id") is not None:
                data = {**data, "ownerId": owner["id"]}
        return data


def _ids_from_snapshots(data: Any, associations: tuple[str, ...]) -> Any:
    """Fill `<name>Id` from a nested `<name>` object when the id is absent."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    for name in associations:
        camel_key = f"{name}Id"
        if data.get(camel_key) is not None or data.get(f"{name}_id") is not None:
            continue
        snapshot = data.get(name)
        if isinstance(snapshot, dict) and snapshot.get("id") is not None:
            data[camel_key] = snapshot["id"]
        elif isinstance(snapshot, BaseModel) and getattr(snapshot, "id", None) is not None:
            data[camel_key] = snapshot.id
    return data


# =============================================================================
# BOOKINGS
# =============================================================================


class Reservation(WireModel):
    """A scheduled client visit, 30 to 120 minutes long."""

    id: int | None = None
    client_id: int | None = None
    car_id: int | None = None
    mechanic_id: int | None = None
    service_id: int | None = None
    client: Client | None = None
    car: Car | None = None
    mechanic: Mechanic | None = None
    service: Service | None = None
    visit_start: Instant | None = None
    visit_end: Instant | None = None
    status: str | None = None
    additional_details: str | None = None
    date_added: Instant | None = None
    version: int | None = None

    @model_validator(mode="before")
    @classmethod
    def read_wire_names(cls, data: Any) -> Any:
        data = _ids_from_snapshots(data, ("client", "car", "mechanic", "service"))
        if isinstance(data, dict):
            # Data Store names the reservation window visitDateTime/endDateTime
            if "visitDateTime" in data and "visitStart" not in data:
                data["visitStart"] = data.pop("visitDateTime")
            if "endDateTime" in data and "visitEnd" not in data:
                data["visitEnd"] = data.pop("endDateTime")
        return data

    def to_wire(self) -> dict[str, Any]:
        payload = {
            "clientId": self.client_id,
            "carId": self.car_id,
            "mechanicId": self.mechanic_id,
            "serviceId": self.service_id,
            "visitDateTime": self.visit_start.isoformat() if self.visit_start else None,
            "endDateTime": self.visit_end.isoformat() if self.visit_end else None,
            "status": self.status,
            "additionalDetails": self.additional_details,
            "dateAdded": self.date_added.isoformat() if self.date_added else None,
            "version": self.version,
        }
        return {key: value for key, value in payload.items() if value is not None}


class RepairJob(WireModel):
    """An open-ended mechanic work order, may span several days."""

    id: int | None = None
    client_id: int | None = None
    mechanic_id: int | None = None
    service_id: int | None = None
    client: Client | None = None
    mechanic: Mechanic | None = None
    service: Service | None = None
    start: Instant | None = None
    end: Instant | None = None
    status: str | None = None
    additional_details: str | None = None
    version: int | None = None

    @model_validator(mode="before")
    @classmethod
    def read_wire_names(cls, data: Any) -> Any:
        data = _ids_from_snapshots(data, ("client", "mechanic", "service"))
        if isinstance(data, dict):
            if "startDateTime" in data and "start" not in data:
                data["start"] = data.pop("startDateTime")
            if "endDateTime" in data and "end" not in data:
                data["end"] = data.pop("endDateTime")
        return data

    def to_wire(self) -> dict[str, Any]:
        payload = {
            "clientId": self.client_id,
            "mechanicId": self.mechanic_id,
            "serviceId": self.service_id,
            "startDateTime": self.start.isoformat() if self.start else None,
            "endDateTime": self.end.isoformat() if self.end else None,
            "status": self.status,
            "additionalDetails": self.additional_details,
            "version": self.version,
        }
        return {key: value for key, value in payload.items() if value is not None}
