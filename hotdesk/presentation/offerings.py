from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends

from hotdesk.core.repositories.data_store import DataStore
from hotdesk.presentation.dependencies import get_store
from hotdesk.schemas.models import Offering, OfferingCreate, OfferingUpdate
from hotdesk.services.offering_service import (
    cancel_offering_service,
    create_offering_service,
    get_offering_service,
    list_offerings_service,
    update_offering_service,
)

router = APIRouter(prefix="/offerings", tags=["offerings"])


@router.post("", response_model=Offering, status_code=201)
def post_offerings(body: OfferingCreate, store: DataStore = Depends(get_store)) -> Offering:
    """
    Release an assigned workspace to the pool. 409 when the user holds no
    covering assignment or already offers an overlapping window.
    """
    return create_offering_service(body, store)


@router.get("", response_model=None)
def get_offerings(
    expanded: bool = False,
    user_id: Optional[str] = None,
    workspace_id: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    store: DataStore = Depends(get_store),
):
    return list_offerings_service(
        store,
        expanded=expanded,
        user_id=user_id,
        workspace_id=workspace_id,
        start=start,
        end=end,
    )


@router.get("/{offering_id}", response_model=None)
def get_offerings_offering_id(offering_id: str, expanded: bool = False, store: DataStore = Depends(get_store)):
    return get_offering_service(offering_id, store, expanded=expanded)


@router.patch("/{offering_id}", response_model=Offering)
def patch_offerings_offering_id(
    offering_id: str,
    body: OfferingUpdate,
    store: DataStore = Depends(get_store),
) -> Offering:
    return update_offering_service(offering_id, body, store)


@router.delete("/{offering_id}", response_model=Offering)
def delete_offerings_offering_id(offering_id: str, store: DataStore = Depends(get_store)) -> Offering:
    """Cancel the offering. Bookings made against it are kept."""
    return cancel_offering_service(offering_id, store)
