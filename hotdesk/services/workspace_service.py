from __future__ import annotations

from typing import Any

from hotdesk.core.entities.workspace import Workspace as CoreWorkspace
from hotdesk.core.repositories.data_store import DataStore
from hotdesk.core.use_cases.manage_workspaces import (
    CreateWorkspaceUseCase,
    RemoveWorkspaceUseCase,
    UpdateWorkspaceUseCase,
)
from hotdesk.schemas.models import Workspace, WorkspaceIn, WorkspaceUpdate


def to_workspace_schema(workspace: CoreWorkspace) -> Workspace:
    return Workspace(
        id=workspace.id,
        name=workspace.name,
        floor_id=workspace.floor_id,
        details=workspace.details,
        properties=workspace.properties,
    )


def create_workspace_service(body: WorkspaceIn, store: DataStore) -> Workspace:
    workspace = CoreWorkspace(
        id=body.id,
        name=body.name,
        floor_id=body.floor_id,
        details=body.details,
        properties=dict(body.properties),
    )
    return to_workspace_schema(CreateWorkspaceUseCase(store=store).execute(workspace=workspace))


def get_workspace_service(workspace_id: str, store: DataStore) -> Workspace:
    return to_workspace_schema(store.workspaces.get_one(workspace_id))


def list_workspaces_service(store: DataStore) -> list[Workspace]:
    return [to_workspace_schema(w) for w in store.workspaces.get_all()]


def update_workspace_service(workspace_id: str, body: WorkspaceUpdate, store: DataStore) -> Workspace:
    workspace = UpdateWorkspaceUseCase(store=store).execute(
        workspace_id=workspace_id,
        name=body.name,
        floor_id=body.floor_id,
        details=body.details,
        properties=body.properties,
    )
    return to_workspace_schema(workspace)


def update_workspace_properties_service(
    workspace_id: str, properties: dict[str, Any], store: DataStore
) -> Workspace:
    store.workspaces.update_properties(workspace_id, properties)
    return get_workspace_service(workspace_id, store)


def remove_workspace_service(workspace_id: str, store: DataStore) -> None:
    RemoveWorkspaceUseCase(store=store).execute(workspace_id=workspace_id)
