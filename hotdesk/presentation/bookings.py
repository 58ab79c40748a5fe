from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends

from hotdesk.core.repositories.data_store import DataStore
from hotdesk.presentation.dependencies import get_store
from hotdesk.schemas.models import Booking, BookingCreate, BookingUpdate
from hotdesk.services.booking_service import (
    cancel_booking_service,
    create_booking_service,
    get_booking_service,
    list_bookings_service,
    update_booking_service,
)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=Booking, status_code=201)
def post_bookings(body: BookingCreate, store: DataStore = Depends(get_store)) -> Booking:
    """
    Book a workspace. 409 when it is already booked, or owned and not
    offered, for any part of the window.
    """
    return create_booking_service(body, store)


@router.get("", response_model=None)
def get_bookings(
    expanded: bool = False,
    user_id: Optional[str] = None,
    workspace_id: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    store: DataStore = Depends(get_store),
):
    return list_bookings_service(
        store,
        expanded=expanded,
        user_id=user_id,
        workspace_id=workspace_id,
        start=start,
        end=end,
    )


@router.get("/{booking_id}", response_model=None)
def get_bookings_booking_id(booking_id: str, expanded: bool = False, store: DataStore = Depends(get_store)):
    return get_booking_service(booking_id, store, expanded=expanded)


@router.patch("/{booking_id}", response_model=Booking)
def patch_bookings_booking_id(
    booking_id: str,
    body: BookingUpdate,
    store: DataStore = Depends(get_store),
) -> Booking:
    return update_booking_service(booking_id, body, store)


@router.delete("/{booking_id}", response_model=Booking)
def delete_bookings_booking_id(booking_id: str, store: DataStore = Depends(get_store)) -> Booking:
    """Cancel the booking; repeating the call is a no-op"""
    return cancel_booking_service(booking_id, store)
