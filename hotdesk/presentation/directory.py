from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends

from hotdesk.core.repositories.data_store import DataStore
from hotdesk.presentation.dependencies import get_store
from hotdesk.schemas.models import Assignment, User, UserAssignment
from hotdesk.services.directory_service import (
    assigned_users_service,
    get_user_service,
    list_assignments_service,
    list_users_service,
)

router = APIRouter(tags=["directory"])


@router.get("/users", response_model=List[User])
def get_users(store: DataStore = Depends(get_store)) -> List[User]:
    return list_users_service(store)


@router.get("/users/assigned", response_model=List[UserAssignment])
def get_users_assigned(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    at: Optional[datetime] = None,
    store: DataStore = Depends(get_store),
) -> List[UserAssignment]:
    """Users holding an assignment at `at`, or overlapping [start, end)"""
    return assigned_users_service(store, start=start, end=end, at=at)


@router.get("/users/{user_id}", response_model=User)
def get_users_user_id(user_id: str, store: DataStore = Depends(get_store)) -> User:
    return get_user_service(user_id, store)


@router.get("/assignments", response_model=List[Assignment])
def get_assignments(
    user_id: Optional[str] = None,
    workspace_id: Optional[str] = None,
    store: DataStore = Depends(get_store),
) -> List[Assignment]:
    return list_assignments_service(store, user_id=user_id, workspace_id=workspace_id)
