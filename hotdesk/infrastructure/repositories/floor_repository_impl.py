from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, select

from hotdesk.core.entities.floor import Floor
from hotdesk.core.errors import InvalidOperationError, NotFoundError
from hotdesk.core.repositories.floor_repository import FloorRepository
from hotdesk.infrastructure.models.models import FloorModel, WorkspaceModel
from hotdesk.infrastructure.repositories.base import SqlRepository, new_id, utcnow
from hotdesk.infrastructure.repositories.workspace_repository_impl import delete_workspace_rows


def _to_floor(row: FloorModel) -> Floor:
    return Floor(
        id=row.id,
        name=row.name,
        address=row.address,
        download_url=row.download_url,
        deleted_at=row.deleted_at,
    )


class FloorRepositoryImpl(SqlRepository, FloorRepository):
    def _live_row(self, floor_id: str) -> FloorModel:
        row = self._get(FloorModel, floor_id)
        if row is None or row.deleted_at is not None:
            raise NotFoundError(f"Floor {floor_id!r} not found")
        return row

    def get_one(self, floor_id: str) -> Floor:
        with self._guard():
            return _to_floor(self._live_row(floor_id))

    def get_all(self) -> list[Floor]:
        with self._guard():
            rows = self._scalars(select(FloorModel).where(FloorModel.deleted_at.is_(None)).order_by(FloorModel.name))
        return [_to_floor(r) for r in rows]

    def get_all_ids(self) -> list[str]:
        with self._guard():
            return list(self._db.scalars(select(FloorModel.id).where(FloorModel.deleted_at.is_(None))))

    def create(self, floor: Floor) -> str:
        row = FloorModel(
            id=floor.id or new_id(),
            name=floor.name,
            address=floor.address,
            download_url=floor.download_url,
        )
        with self._guard():
            self._db.add(row)
            self._commit()
        return row.id

    def update(self, floor_id: str, floor: Floor) -> None:
        with self._guard():
            row = self._live_row(floor_id)
            row.name = floor.name
            row.address = floor.address
            row.download_url = floor.download_url
            self._commit()

    def remove(self, floor_id: str, *, force: bool = False) -> None:
        with self._guard():
            row = self._live_row(floor_id)
            live_workspaces = self._scalars(
                select(WorkspaceModel)
                .where(WorkspaceModel.floor_id == floor_id)
                .where(WorkspaceModel.deleted_at.is_(None))
            )
            if live_workspaces and not force:
                raise InvalidOperationError(
                    f"invalid operation: floor {floor_id!r} still has {len(live_workspaces)} workspace(s)"
                )

            now = utcnow()
            for workspace in live_workspaces:
                workspace.deleted_at = now
            row.deleted_at = now
            self._commit()

    def deleted(self) -> list[Floor]:
        with self._guard():
            rows = self._scalars(select(FloorModel).where(FloorModel.deleted_at.is_not(None)))
        return [_to_floor(r) for r in rows]

    def delete(self, floor_ids: Iterable[str]) -> None:
        ids = list(floor_ids)
        if not ids:
            return
        with self._guard():
            workspace_ids = list(self._db.scalars(select(WorkspaceModel.id).where(WorkspaceModel.floor_id.in_(ids))))
            delete_workspace_rows(self._db, workspace_ids)
            self._db.execute(delete(FloorModel).where(FloorModel.id.in_(ids)))
            self._commit()
