"""
Scheduling coordinator: role-scoped, filtered, unified calendar views plus
validated booking mutations.

Load pipeline:
    Data Store -> role scoping -> filters -> window -> event transform

A failed fetch of one collection never hides the other; the failure becomes
a notification on the view. Only the most recent load is applied.
"""

import asyncio
import calendar
from datetime import date, datetime, timedelta
from typing import Any, Awaitable, Callable

from core.config import WORKSHOP_TIMEZONE
from core.errors import (
    ConflictError,
    NotFoundError,
    TransportError,
    ValidationCodes,
    ValidationError,
)
from core.lifecycle import (
    STATES,
    RecordKind,
    Role,
    check_transition,
    initial_status,
    normalize_status,
)
from core.validation import require_valid_duration, validate_order
from models.events import (
    CallerIdentity,
    Direction,
    Notification,
    NotifyCallback,
    ScheduleFilter,
    ScheduleView,
    Severity,
    ViewWindow,
)
from models.records import Car, Client, RepairJob, Reservation
from models.requests import (
    CreateRepairJob,
    CreateReservationForNewClient,
    CreateReservationRequest,
    RepairJobUpdate,
    ReservationUpdate,
)
from services.calendar import transform_all
from services.data_store import DataStore
from services.filters import apply_filters, record_start
from services.references import (
    ReferenceIndex,
    hydrate_repair_job,
    hydrate_reservation,
    load_reference_index,
    mechanic_ids_for,
)

TIME_FIELDS = {"visit_start", "visit_end", "start", "end"}


# =============================================================================
# ROLE SCOPING
# =============================================================================


def belongs_to_mechanic(
    record: Reservation | RepairJob, caller: CallerIdentity, mechanic_ids: set[int]
) -> bool:
    """
    Match a record to a mechanic caller.

    The embedded mechanic snapshot is compared by email. Without a snapshot
    the record's mechanic id is looked up in the ids resolved for the caller.
    """
    if not caller.email:
        return False
    email = caller.email.strip().lower()
    if record.mechanic is not None and record.mechanic.email:
        return record.mechanic.email.strip().lower() == email
    return record.mechanic_id is not None and record.mechanic_id in mechanic_ids


def scope_records(
    caller: CallerIdentity,
    records: list,
    mechanic_ids: set[int] | None = None,
) -> list:
    """Restrict records to what the caller's role may see."""
    role = Role(caller.role)
    if role == Role.MECHANIC:
        ids = mechanic_ids or set()
        return [r for r in records if belongs_to_mechanic(r, caller, ids)]
    if role == Role.CLIENT:
        if caller.user_id is None:
            return []
        return [r for r in records if r.client_id == caller.user_id]
    return list(records)


# =============================================================================
# NAVIGATION
# =============================================================================


def shift_month(day: date, months: int) -> date:
    """Move by whole months, clamping the day to the target month's length."""
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def navigate(window: ViewWindow, direction: Direction) -> ViewWindow:
    """Advance the window one unit of its own granularity."""
    step = -1 if direction == "prev" else 1
    if window.view == "day":
        anchor = window.anchor + timedelta(days=step)
    elif window.view == "week":
        anchor = window.anchor + timedelta(days=7 * step)
    else:
        anchor = shift_month(window.anchor, step)
    return ViewWindow(view=window.view, anchor=anchor)


def go_to_today(window: ViewWindow, today: date | None = None) -> ViewWindow:
    today = today or datetime.now(WORKSHOP_TIMEZONE).date()
    return ViewWindow(view=window.view, anchor=today)


def in_window(records: list, window: ViewWindow) -> list:
    """Records starting inside the window (start inclusive, end exclusive)."""
    first, last = window.range()
    selected = []
    for record in records:
        start = record_start(record)
        if start is not None and first <= start < last:
            selected.append(record)
    return selected


# =============================================================================
# COORDINATOR
# =============================================================================


def load_failure(label: str, error: TransportError, severity: Severity = "error") -> Notification:
    """Notification for a Data Store fetch that failed; titled after its severity."""
    return Notification(
        title=severity.capitalize(),
        message=f"Failed to load {label}: {error.message}",
        severity=severity,
    )


class SchedulingCoordinator:
    """
    Single entry point for calendar views and booking mutations.

    One coordinator serves one presentation session: `current_view` is the
    last applied view and superseded loads are dropped.
    """

    def __init__(
        self,
        store: DataStore,
        notify: NotifyCallback | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.notify = notify
        self.clock = clock or (lambda: datetime.now(WORKSHOP_TIMEZONE))
        self.current_view: ScheduleView | None = None
        self.references: ReferenceIndex | None = None
        self._generation = 0

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    async def load_view(
        self,
        caller: CallerIdentity,
        schedule_filter: ScheduleFilter | None = None,
        search_text: str = "",
        window: ViewWindow | None = None,
        with_references: bool = False,
    ) -> ScheduleView | None:
        """
        Fetch, scope, filter and transform both collections into one view.

        With `with_references` the reference lists are fetched alongside and
        used to fill in snapshots the Data Store left out; if they fail to
        load the view still renders, with a warning.

        Returns None (and leaves `current_view` alone) when a newer load was
        started while this one was waiting on the Data Store.
        """
        self._generation += 1
        generation = self._generation
        is_mechanic = Role(caller.role) == Role.MECHANIC

        fetches: list[Awaitable[Any]] = [self.store.list_reservations(), self.store.list_repair_jobs()]
        if with_references:
            fetches.append(load_reference_index(self.store))
        elif is_mechanic:
            fetches.append(self.store.list_mechanics())
        results = await asyncio.gather(*fetches, return_exceptions=True)

        if generation != self._generation:
            return None

        notifications: list[Notification] = []
        reservations = self._collect(results[0], "reservations", notifications)
        repair_jobs = self._collect(results[1], "repair jobs", notifications)

        mechanics: list = []
        if with_references:
            index = self._collect(
                results[2], "reference lists", notifications, severity="warning", empty=lambda: None
            )
            if index is not None:
                self.references = index
            if self.references is not None:
                mechanics = list(self.references.mechanics.values())
        elif is_mechanic:
            mechanics = self._collect(results[2], "mechanics", notifications, severity="warning")

        mechanic_ids: set[int] = set()
        if is_mechanic:
            mechanic_ids = mechanic_ids_for(caller, mechanics)

        if self.references is not None:
            reservations = [hydrate_reservation(r, self.references) for r in reservations]
            repair_jobs = [hydrate_repair_job(j, self.references) for j in repair_jobs]

        reservations = scope_records(caller, reservations, mechanic_ids)
        repair_jobs = scope_records(caller, repair_jobs, mechanic_ids)

        reservations = apply_filters(reservations, schedule_filter, search_text)
        repair_jobs = apply_filters(repair_jobs, schedule_filter, search_text)

        if window is not None:
            reservations = in_window(reservations, window)
            repair_jobs = in_window(repair_jobs, window)

        view = ScheduleView(
            events=transform_all(reservations, repair_jobs),
            read_only=is_mechanic,
            notifications=notifications,
            window=window,
            generation=generation,
        )
        self.current_view = view
        for notification in notifications:
            self._emit(notification)
        return view

    async def refresh_references(self) -> ReferenceIndex:
        """Load the reference lists used to fill in missing record snapshots."""
        self.references = await load_reference_index(self.store)
        return self.references

    def _collect(
        self,
        result: Any,
        label: str,
        notifications: list[Notification],
        severity: Severity = "error",
        empty: Callable[[], Any] = list,
    ) -> Any:
        """Unwrap one gather result; transport failures degrade to `empty()`."""
        if isinstance(result, TransportError):
            notifications.append(load_failure(label, result, severity))
            return empty()
        if isinstance(result, BaseException):
            raise result
        return result

    def _emit(self, notification: Notification) -> None:
        if self.notify is not None:
            self.notify(notification.title, notification.message, notification.severity)

    def navigate(self, window: ViewWindow, direction: Direction) -> ViewWindow:
        return navigate(window, direction)

    def go_to_today(self, window: ViewWindow) -> ViewWindow:
        return go_to_today(window, self.clock().date())

    # -------------------------------------------------------------------------
    # Details
    # -------------------------------------------------------------------------

    async def get_reservation_detail(self, reservation_id: int) -> Reservation | None:
        """Reservation for a detail view, or None for the empty state."""
        return await self._detail(self.store.get_reservation, reservation_id, "reservation")

    async def get_repair_job_detail(self, job_id: int) -> RepairJob | None:
        """Repair job for a detail view, or None for the empty state."""
        return await self._detail(self.store.get_repair_job, job_id, "repair job")

    async def is_visible(self, caller: CallerIdentity, record: Reservation | RepairJob) -> bool:
        """Whether a single record falls inside the caller's role scope."""
        mechanic_ids: set[int] = set()
        if Role(caller.role) == Role.MECHANIC and (record.mechanic is None or not record.mechanic.email):
            mechanic_ids = mechanic_ids_for(caller, await self.store.list_mechanics())
        return bool(scope_records(caller, [record], mechanic_ids))

    async def _detail(self, fetch, record_id: int, label: str):
        try:
            return await fetch(record_id)
        except NotFoundError:
            return None
        except TransportError as e:
            self._emit(load_failure(label, e))
            return None

    # -------------------------------------------------------------------------
    # Reservations
    # -------------------------------------------------------------------------

    async def create_reservation(
        self, caller: CallerIdentity, request: CreateReservationRequest
    ) -> Reservation:
        """
        Validate and create a reservation.

        Staff bookings start confirmed, client bookings unconfirmed. Booking
        for a new client registers the client (and car, if given) first.
        """
        role = Role(caller.role)
        self._ensure_not_read_only(role)

        client_id = getattr(request, "client_id", None)
        if role == Role.CLIENT:
            if isinstance(request, CreateReservationForNewClient) or client_id != caller.user_id:
                raise ValidationError(
                    ValidationCodes.NOT_PERMITTED, "Clients can only book reservations for themselves"
                )
            status = initial_status(RecordKind.RESERVATION, role)
        else:
            status = normalize_status(request.status) or initial_status(RecordKind.RESERVATION, role)
        self._ensure_known_status(RecordKind.RESERVATION, status)
        require_valid_duration(request.visit_start, request.visit_end)

        car_id = getattr(request, "car_id", None)
        if isinstance(request, CreateReservationForNewClient):
            client = await self.store.create_client(
                Client(name=request.name, phone=request.phone, email=request.email)
            )
            client_id = client.id
            if request.car_model or request.car_make:
                car = await self.store.create_car(
                    Car(make=request.car_make, model=request.car_model, owner_id=client_id)
                )
                car_id = car.id

        reservation = Reservation(
            client_id=client_id,
            car_id=car_id,
            mechanic_id=request.mechanic_id,
            service_id=request.service_id,
            visit_start=request.visit_start,
            visit_end=request.visit_end,
            status=status,
            additional_details=request.additional_details,
            date_added=self.clock(),
        )
        return await self.store.create_reservation(reservation)

    async def update_reservation(
        self, caller: CallerIdentity, reservation: Reservation, update: ReservationUpdate
    ) -> Reservation:
        """
        Apply a staff edit to `reservation` (the record as the editor loaded it).

        Status changes go through the lifecycle, edited times through the
        duration rule, both before the Data Store is touched.
        """
        role = Role(caller.role)
        self._ensure_not_read_only(role)
        if role == Role.CLIENT:
            raise ValidationError(ValidationCodes.NOT_PERMITTED, "Clients can only cancel reservations")

        changes = update.model_dump(exclude_unset=True, exclude={"version"})
        if "status" in changes:
            changes["status"] = normalize_status(changes["status"])
        candidate = reservation.model_copy(update=changes)

        if normalize_status(candidate.status) != normalize_status(reservation.status):
            check_transition(role, RecordKind.RESERVATION, reservation.status, candidate.status)
        if TIME_FIELDS & changes.keys():
            require_valid_duration(candidate.visit_start, candidate.visit_end)

        expected = update.version if update.version is not None else reservation.version
        await self._ensure_unchanged(RecordKind.RESERVATION, reservation.id, expected, self.store.get_reservation)
        return await self.store.update_reservation(reservation.id, candidate)

    async def cancel_reservation(self, caller: CallerIdentity, reservation: Reservation) -> Reservation:
        """Cancellation is a status change, the record is kept."""
        return await self.apply_transition(caller, RecordKind.RESERVATION, reservation, "cancelled")

    async def delete_reservation(self, caller: CallerIdentity, reservation_id: int) -> None:
        self._ensure_staff(Role(caller.role), "delete reservations")
        await self.store.delete_reservation(reservation_id)

    # -------------------------------------------------------------------------
    # Repair jobs
    # -------------------------------------------------------------------------

    async def create_repair_job(self, caller: CallerIdentity, request: CreateRepairJob) -> RepairJob:
        role = Role(caller.role)
        self._ensure_staff(role, "create repair jobs")
        status = normalize_status(request.status) or initial_status(RecordKind.REPAIR_JOB, role)
        self._ensure_known_status(RecordKind.REPAIR_JOB, status)
        self._raise_if(validate_order(request.start, request.end))

        job = RepairJob(
            client_id=request.client_id,
            mechanic_id=request.mechanic_id,
            service_id=request.service_id,
            start=request.start,
            end=request.end,
            status=status,
            additional_details=request.additional_details,
        )
        return await self.store.create_repair_job(job)

    async def update_repair_job(
        self, caller: CallerIdentity, job: RepairJob, update: RepairJobUpdate
    ) -> RepairJob:
        role = Role(caller.role)
        self._ensure_not_read_only(role)
        if role == Role.CLIENT:
            raise ValidationError(ValidationCodes.NOT_PERMITTED, "Clients can only cancel repair jobs")

        changes = update.model_dump(exclude_unset=True, exclude={"version"})
        if "status" in changes:
            changes["status"] = normalize_status(changes["status"])
        candidate = job.model_copy(update=changes)

        if normalize_status(candidate.status) != normalize_status(job.status):
            check_transition(role, RecordKind.REPAIR_JOB, job.status, candidate.status)
        if TIME_FIELDS & changes.keys():
            self._raise_if(validate_order(candidate.start, candidate.end))

        expected = update.version if update.version is not None else job.version
        await self._ensure_unchanged(RecordKind.REPAIR_JOB, job.id, expected, self.store.get_repair_job)
        return await self.store.update_repair_job(job.id, candidate)

    async def cancel_repair_job(self, caller: CallerIdentity, job: RepairJob) -> RepairJob:
        """Clients may only cancel upcoming jobs; staff any job."""
        return await self.apply_transition(caller, RecordKind.REPAIR_JOB, job, "cancelled")

    async def delete_repair_job(self, caller: CallerIdentity, job_id: int) -> None:
        self._ensure_staff(Role(caller.role), "delete repair jobs")
        await self.store.delete_repair_job(job_id)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    async def apply_transition(
        self,
        caller: CallerIdentity,
        kind: RecordKind,
        record: Reservation | RepairJob,
        target: str,
    ) -> Reservation | RepairJob:
        """
        Move `record` to `target` status through the Data Store.

        The lifecycle and ownership checks run first; nothing is sent when
        they fail.
        """
        role = Role(caller.role)
        kind = RecordKind(kind)
        check_transition(role, kind, record.status, target)
        if role == Role.CLIENT and record.client_id != caller.user_id:
            raise ValidationError(ValidationCodes.NOT_PERMITTED, "Clients can only change their own bookings")

        updated = record.model_copy(update={"status": normalize_status(target)})
        if kind == RecordKind.RESERVATION:
            await self._ensure_unchanged(kind, record.id, record.version, self.store.get_reservation)
            return await self.store.update_reservation(record.id, updated)
        await self._ensure_unchanged(kind, record.id, record.version, self.store.get_repair_job)
        return await self.store.update_repair_job(record.id, updated)

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------

    async def _ensure_unchanged(
        self,
        kind: RecordKind,
        record_id: int,
        expected: int | None,
        fetch: Callable[[int], Awaitable[Reservation | RepairJob]],
    ) -> None:
        """Reject the write when the stored version moved past the one the editor saw."""
        if expected is None:
            return
        stored = await fetch(record_id)
        if stored.version is not None and stored.version != expected:
            raise ConflictError(kind.value, record_id, expected, stored.version)

    @staticmethod
    def _ensure_not_read_only(role: Role) -> None:
        if role == Role.MECHANIC:
            raise ValidationError(ValidationCodes.READ_ONLY, "The mechanic schedule is read-only")

    @staticmethod
    def _ensure_staff(role: Role, action: str) -> None:
        SchedulingCoordinator._ensure_not_read_only(role)
        if role != Role.MANAGER:
            raise ValidationError(ValidationCodes.NOT_PERMITTED, f"Only staff can {action}")

    @staticmethod
    def _ensure_known_status(kind: RecordKind, status: str | None) -> None:
        if status not in STATES[kind]:
            raise ValidationError(ValidationCodes.ILLEGAL_TRANSITION, f"Unknown status '{status}'")

    @staticmethod
    def _raise_if(error: ValidationError | None) -> None:
        if error is not None:
            raise error

