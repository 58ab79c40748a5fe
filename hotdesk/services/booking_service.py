from __future__ import annotations

from datetime import datetime

from hotdesk.core.entities.booking import Booking as CoreBooking
from hotdesk.core.entities.booking import ExpandedBooking as CoreExpandedBooking
from hotdesk.core.repositories.data_store import DataStore
from hotdesk.core.use_cases.reserve_workspace import (
    CancelBookingUseCase,
    CreateBookingUseCase,
    UpdateBookingUseCase,
)
from hotdesk.core.use_cases.workspace_locks import workspace_locks
from hotdesk.schemas.models import Booking, BookingCreate, BookingUpdate, ExpandedBooking
from hotdesk.services.window_queries import list_windows


def to_booking_schema(booking: CoreBooking | CoreExpandedBooking) -> Booking | ExpandedBooking:
    if isinstance(booking, CoreExpandedBooking):
        return ExpandedBooking(
            **to_booking_schema(booking.booking).model_dump(),
            workspace_name=booking.workspace_name,
            user_name=booking.user_name,
            floor_id=booking.floor_id,
            floor_name=booking.floor_name,
        )
    return Booking(
        id=booking.id,
        workspace_id=booking.workspace_id,
        user_id=booking.user_id,
        start_time=booking.start_time,
        end_time=booking.end_time,
        cancelled=booking.cancelled,
        created_by=booking.created_by,
    )


def create_booking_service(body: BookingCreate, store: DataStore) -> Booking:
    use_case = CreateBookingUseCase(store=store, locks=workspace_locks)
    booking = use_case.execute(
        workspace_id=body.workspace_id,
        user_id=body.user_id,
        start=body.start_time,
        end=body.end_time,
        created_by=body.created_by,
    )
    return to_booking_schema(booking)


def get_booking_service(booking_id: str, store: DataStore, *, expanded: bool = False) -> Booking | ExpandedBooking:
    if expanded:
        return to_booking_schema(store.bookings.get_one_expanded(booking_id))
    return to_booking_schema(store.bookings.get_one(booking_id))


def list_bookings_service(
    store: DataStore,
    *,
    expanded: bool = False,
    user_id: str | None = None,
    workspace_id: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Booking | ExpandedBooking]:
    items = list_windows(
        store.bookings,
        expanded=expanded,
        user_id=user_id,
        workspace_id=workspace_id,
        start=start,
        end=end,
    )
    return [to_booking_schema(b) for b in items]


def update_booking_service(booking_id: str, body: BookingUpdate, store: DataStore) -> Booking:
    use_case = UpdateBookingUseCase(store=store, locks=workspace_locks)
    booking = use_case.execute(
        booking_id=booking_id,
        workspace_id=body.workspace_id,
        user_id=body.user_id,
        start=body.start_time,
        end=body.end_time,
        created_by=body.created_by,
        cancelled=body.cancelled,
    )
    return to_booking_schema(booking)


def cancel_booking_service(booking_id: str, store: DataStore) -> Booking:
    return to_booking_schema(CancelBookingUseCase(store=store, locks=workspace_locks).execute(booking_id=booking_id))
