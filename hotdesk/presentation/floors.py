from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Response, UploadFile

from hotdesk.core.errors import ValidationError
from hotdesk.core.repositories.data_store import DataStore
from hotdesk.core.use_cases.manage_floors import ImageSink
from hotdesk.infrastructure.image_sink import ACCEPTED_IMAGE_TYPES, MAX_IMAGE_BYTES, sniff_image_type
from hotdesk.presentation.dependencies import get_image_sink, get_store
from hotdesk.schemas.models import Availability, DeleteFloor, Floor, FloorUpdate, Workspace
from hotdesk.services.floor_service import (
    create_floor_service,
    floor_availability_service,
    floor_workspaces_service,
    get_floor_service,
    list_floors_service,
    remove_floor_service,
    update_floor_service,
)

router = APIRouter(prefix="/floors", tags=["floors"])


@router.post("", response_model=Floor, status_code=201)
def post_floors(
    name: str = Form(""),
    address: str = Form(""),
    image: Optional[UploadFile] = File(None),
    store: DataStore = Depends(get_store),
    image_sink: ImageSink = Depends(get_image_sink),
) -> Floor:
    """
    Create a floor from a multipart form carrying `name`, `address` and a
    png/jpeg floor-plan `image` of at most 6 MiB.
    """
    if image is None:
        raise ValidationError("image is required")

    content = image.file
    content.seek(0, 2)
    size = content.tell()
    content.seek(0)
    if size > MAX_IMAGE_BYTES:
        raise ValidationError(f"image exceeds {MAX_IMAGE_BYTES} bytes")

    mime = sniff_image_type(content)
    if mime not in ACCEPTED_IMAGE_TYPES:
        raise ValidationError(f"The image must be of type jpg, jpeg or png, got {mime or 'unknown'}")

    return create_floor_service(name=name, address=address, image=content, store=store, image_sink=image_sink)


@router.get("", response_model=List[Floor])
def get_floors(store: DataStore = Depends(get_store)) -> List[Floor]:
    return list_floors_service(store)


@router.get("/{floor_id}", response_model=Floor)
def get_floors_floor_id(floor_id: str, store: DataStore = Depends(get_store)) -> Floor:
    return get_floor_service(floor_id, store)


@router.patch("/{floor_id}", response_model=Floor)
def patch_floors_floor_id(floor_id: str, body: FloorUpdate, store: DataStore = Depends(get_store)) -> Floor:
    return update_floor_service(floor_id, body, store)


@router.delete("/{floor_id}")
def delete_floors_floor_id(
    floor_id: str,
    body: Optional[DeleteFloor] = Body(None),
    store: DataStore = Depends(get_store),
) -> Response:
    """
    Soft-delete a floor. Returns 403 while live workspaces remain unless
    `force_delete` is set, in which case they are removed with it.
    """
    remove_floor_service(floor_id, body or DeleteFloor(), store)
    return Response(status_code=200)


@router.get("/{floor_id}/workspaces", response_model=List[Workspace])
def get_floors_floor_id_workspaces(floor_id: str, store: DataStore = Depends(get_store)) -> List[Workspace]:
    return floor_workspaces_service(floor_id, store)


@router.get("/{floor_id}/availability", response_model=Availability)
def get_floors_floor_id_availability(
    floor_id: str,
    start: datetime,
    end: datetime,
    store: DataStore = Depends(get_store),
) -> Availability:
    """Workspaces on the floor that any user can book for the whole window"""
    return floor_availability_service(floor_id, start, end, store)
