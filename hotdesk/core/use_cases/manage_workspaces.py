from __future__ import annotations

from typing import Any

import structlog

from hotdesk.core.entities.workspace import Workspace
from hotdesk.core.errors import ConflictError, ValidationError
from hotdesk.core.repositories.data_store import DataStore

logger = structlog.get_logger(__name__)


class CreateWorkspaceUseCase:
    def __init__(self, *, store: DataStore) -> None:
        self._store = store

    def execute(self, *, workspace: Workspace) -> Workspace:
        if not workspace.name or not workspace.name.strip():
            raise ValidationError("name must be a non-empty string")
        if not workspace.floor_id:
            raise ValidationError("floor_id is required")
        # Raises NotFoundError for unknown or removed floors
        self._store.floors.get_one(workspace.floor_id)
        if workspace.id and self._store.workspaces.exists(workspace.id):
            raise ConflictError(f"Workspace id {workspace.id!r} is already taken")

        workspace.id = self._store.workspaces.create(workspace)
        logger.info("workspace_created", workspace_id=workspace.id, floor_id=workspace.floor_id)
        return workspace


class UpdateWorkspaceUseCase:
    def __init__(self, *, store: DataStore) -> None:
        self._store = store

    def execute(
        self,
        *,
        workspace_id: str,
        name: str | None = None,
        floor_id: str | None = None,
        details: str | None = None,
        properties: dict[str, Any] | None = None,
    ) -> Workspace:
        workspace = self._store.workspaces.get_one(workspace_id)

        if name is not None:
            if not name.strip():
                raise ValidationError("name must be a non-empty string")
            workspace.name = name
        if floor_id is not None and floor_id != workspace.floor_id:
            self._store.floors.get_one(floor_id)
            workspace.floor_id = floor_id
        if details is not None:
            workspace.details = details
        if properties is not None:
            workspace.properties = properties

        self._store.workspaces.update(workspace_id, workspace)
        return workspace


class RemoveWorkspaceUseCase:
    def __init__(self, *, store: DataStore) -> None:
        self._store = store

    def execute(self, *, workspace_id: str) -> None:
        self._store.workspaces.remove(workspace_id)
        logger.info("workspace_removed", workspace_id=workspace_id)
