"""
Booking mutation requests.

Reservation creation comes in two explicit variants instead of one payload
with loosely related optional fields: booking for a client already in the
Data Store, or registering a walk-in client (and optionally their car) first.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.records import Instant


class RequestModel(BaseModel):
    """Accepts camelCase (as the Data Store speaks it) or snake_case fields."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReservationDetails(RequestModel):
    """Fields shared by both reservation creation variants."""

    mechanic_id: int | None = None
    service_id: int | None = None
    visit_start: Instant
    visit_end: Instant | None = None
    status: str | None = None
    additional_details: str | None = None


class CreateReservationForExistingClient(ReservationDetails):
    kind: Literal["existing_client"] = "existing_client"
    client_id: int
    car_id: int | None = None


class CreateReservationForNewClient(ReservationDetails):
    kind: Literal["new_client"] = "new_client"
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: str | None = None
    car_make: str | None = None
    car_model: str | None = None


CreateReservationRequest = Annotated[
    Union[CreateReservationForExistingClient, CreateReservationForNewClient],
    Field(discriminator="kind"),
]


class ReservationUpdate(RequestModel):
    """
    Edit of an existing reservation.

    Omitted fields keep their stored value. `version` is the version the
    editor loaded; a mismatch with the stored record rejects the write.
    """

    client_id: int | None = None
    car_id: int | None = None
    mechanic_id: int | None = None
    service_id: int | None = None
    visit_start: Instant | None = None
    visit_end: Instant | None = None
    status: str | None = None
    additional_details: str | None = None
    version: int | None = None


class CreateRepairJob(RequestModel):
    client_id: int
    mechanic_id: int | None = None
    service_id: int | None = None
    start: Instant
    end: Instant | None = None
    status: str | None = None
    additional_details: str | None = None


class RepairJobUpdate(RequestModel):
    client_id: int | None = None
    mechanic_id: int | None = None
    service_id: int | None = None
    start: Instant | None = None
    end: Instant | None = None
    status: str | None = None
    additional_details: str | None = None
    version: int | None = None
