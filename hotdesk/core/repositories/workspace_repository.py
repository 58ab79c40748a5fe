from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from hotdesk.core.entities.workspace import Workspace


class WorkspaceRepository(ABC):
    @abstractmethod
    def get_one(self, workspace_id: str) -> Workspace:
        """Raises NotFoundError for unknown or soft-deleted workspaces"""
        raise NotImplementedError

    @abstractmethod
    def get_all(self) -> list[Workspace]:
        raise NotImplementedError

    @abstractmethod
    def exists(self, workspace_id: str) -> bool:
        """True when the id is taken, soft-deleted rows included"""
        raise NotImplementedError

    @abstractmethod
    def create(self, workspace: Workspace) -> str:
        raise NotImplementedError

    @abstractmethod
    def upsert(self, workspace: Workspace) -> str:
        raise NotImplementedError

    @abstractmethod
    def update(self, workspace_id: str, workspace: Workspace) -> None:
        raise NotImplementedError

    @abstractmethod
    def update_properties(self, workspace_id: str, properties: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, workspace_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def by_floor(self, floor_id: str) -> list[Workspace]:
        raise NotImplementedError

    @abstractmethod
    def count_by_floor(self, floor_id: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def available(
        self,
        floor_id: str,
        start: datetime,
        end: datetime,
        *,
        exclude_booking_id: str | None = None,
    ) -> list[str]:
        """
        Ids of the live workspaces on `floor_id` that any user may book for the
        whole of [start, end). `exclude_booking_id` ignores one booking, so an
        update can be checked as if the original were cancelled.
        """
        raise NotImplementedError

    @abstractmethod
    def deleted(self) -> list[Workspace]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, workspace_ids: Iterable[str]) -> None:
        """Hard delete, together with the workspaces' bookings, offerings and assignments"""
        raise NotImplementedError
