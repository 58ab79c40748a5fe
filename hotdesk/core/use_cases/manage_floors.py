from __future__ import annotations

from typing import BinaryIO, Protocol

import structlog

from hotdesk.core.entities.floor import Floor
from hotdesk.core.errors import ValidationError
from hotdesk.core.repositories.data_store import DataStore

logger = structlog.get_logger(__name__)


class ImageSink(Protocol):
    """
    External store for floor-plan images. Returns an opaque id for the
    uploaded content and raises UpstreamFault when the upload fails.
    """

    def upload(self, name: str, content: BinaryIO) -> str:
        ...

    def download_url(self, opaque_id: str) -> str:
        ...


def _require_text(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} must be a non-empty string")
    return value.strip()


class CreateFloorUseCase:
    def __init__(self, *, store: DataStore, image_sink: ImageSink) -> None:
        self._store = store
        self._image_sink = image_sink

    def execute(self, *, name: str, address: str, image: BinaryIO) -> Floor:
        name = _require_text(name, "name")
        address = _require_text(address, "address")

        opaque_id = self._image_sink.upload(name, image)
        floor = Floor(name=name, address=address, download_url=self._image_sink.download_url(opaque_id))
        floor.id = self._store.floors.create(floor)

        logger.info("floor_created", floor_id=floor.id, image_id=opaque_id)
        return floor


class UpdateFloorUseCase:
    def __init__(self, *, store: DataStore) -> None:
        self._store = store

    def execute(self, *, floor_id: str, name: str | None = None, address: str | None = None) -> Floor:
        floor = self._store.floors.get_one(floor_id)
        if name is not None:
            floor.name = _require_text(name, "name")
        if address is not None:
            floor.address = _require_text(address, "address")
        self._store.floors.update(floor_id, floor)
        return floor


class RemoveFloorUseCase:
    def __init__(self, *, store: DataStore) -> None:
        self._store = store

    def execute(self, *, floor_id: str, force: bool = False) -> None:
        self._store.floors.remove(floor_id, force=force)
        logger.info("floor_removed", floor_id=floor_id, force=force)
