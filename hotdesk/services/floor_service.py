from __future__ import annotations

from datetime import datetime
from typing import BinaryIO

from hotdesk.core.entities.floor import Floor as CoreFloor
from hotdesk.core.entities.interval import require_window
from hotdesk.core.repositories.data_store import DataStore
from hotdesk.core.use_cases.manage_floors import (
    CreateFloorUseCase,
    ImageSink,
    RemoveFloorUseCase,
    UpdateFloorUseCase,
)
from hotdesk.schemas.models import Availability, DeleteFloor, Floor, FloorUpdate, Workspace
from hotdesk.services.workspace_service import to_workspace_schema


def to_floor_schema(floor: CoreFloor) -> Floor:
    return Floor(id=floor.id, name=floor.name, download_url=floor.download_url, address=floor.address)


def create_floor_service(
    *,
    name: str,
    address: str,
    image: BinaryIO,
    store: DataStore,
    image_sink: ImageSink,
) -> Floor:
    use_case = CreateFloorUseCase(store=store, image_sink=image_sink)
    return to_floor_schema(use_case.execute(name=name, address=address, image=image))


def get_floor_service(floor_id: str, store: DataStore) -> Floor:
    return to_floor_schema(store.floors.get_one(floor_id))


def list_floors_service(store: DataStore) -> list[Floor]:
    return [to_floor_schema(f) for f in store.floors.get_all()]


def update_floor_service(floor_id: str, body: FloorUpdate, store: DataStore) -> Floor:
    use_case = UpdateFloorUseCase(store=store)
    return to_floor_schema(use_case.execute(floor_id=floor_id, name=body.name, address=body.address))


def remove_floor_service(floor_id: str, body: DeleteFloor, store: DataStore) -> None:
    RemoveFloorUseCase(store=store).execute(floor_id=floor_id, force=body.force_delete)


def floor_workspaces_service(floor_id: str, store: DataStore) -> list[Workspace]:
    store.floors.get_one(floor_id)
    return [to_workspace_schema(w) for w in store.workspaces.by_floor(floor_id)]


def floor_availability_service(floor_id: str, start: datetime, end: datetime, store: DataStore) -> Availability:
    start, end = require_window(start, end)
    store.floors.get_one(floor_id)
    return Availability(
        floor_id=floor_id,
        start_time=start,
        end_time=end,
        workspace_ids=store.workspaces.available(floor_id, start, end),
    )
