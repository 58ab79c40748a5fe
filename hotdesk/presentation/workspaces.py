from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Response

from hotdesk.core.repositories.data_store import DataStore
from hotdesk.presentation.dependencies import get_store
from hotdesk.schemas.models import Workspace, WorkspaceIn, WorkspaceUpdate
from hotdesk.services.workspace_service import (
    create_workspace_service,
    get_workspace_service,
    list_workspaces_service,
    remove_workspace_service,
    update_workspace_properties_service,
    update_workspace_service,
)

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.post("", response_model=Workspace, status_code=201)
def post_workspaces(body: WorkspaceIn, store: DataStore = Depends(get_store)) -> Workspace:
    return create_workspace_service(body, store)


@router.get("", response_model=List[Workspace])
def get_workspaces(store: DataStore = Depends(get_store)) -> List[Workspace]:
    return list_workspaces_service(store)


@router.get("/{workspace_id}", response_model=Workspace)
def get_workspaces_workspace_id(workspace_id: str, store: DataStore = Depends(get_store)) -> Workspace:
    return get_workspace_service(workspace_id, store)


@router.patch("/{workspace_id}", response_model=Workspace)
def patch_workspaces_workspace_id(
    workspace_id: str,
    body: WorkspaceUpdate,
    store: DataStore = Depends(get_store),
) -> Workspace:
    return update_workspace_service(workspace_id, body, store)


@router.patch("/{workspace_id}/properties", response_model=Workspace)
def patch_workspaces_workspace_id_properties(
    workspace_id: str,
    properties: Dict[str, Any] = Body(...),
    store: DataStore = Depends(get_store),
) -> Workspace:
    """Replace the free-form properties and nothing else"""
    return update_workspace_properties_service(workspace_id, properties, store)


@router.delete("/{workspace_id}")
def delete_workspaces_workspace_id(workspace_id: str, store: DataStore = Depends(get_store)) -> Response:
    remove_workspace_service(workspace_id, store)
    return Response(status_code=200)
