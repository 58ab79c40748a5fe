from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime

from hotdesk.core.entities.assignment import Assignment


class AssignmentRepository(ABC):
    @abstractmethod
    def get_one(self, assignment_id: str) -> Assignment:
        raise NotImplementedError

    @abstractmethod
    def get_all(self) -> list[Assignment]:
        raise NotImplementedError

    @abstractmethod
    def by_workspace(self, workspace_id: str) -> list[Assignment]:
        raise NotImplementedError

    @abstractmethod
    def by_user(self, user_id: str) -> list[Assignment]:
        raise NotImplementedError

    @abstractmethod
    def create(self, assignment: Assignment) -> str:
        raise NotImplementedError

    @abstractmethod
    def update(self, assignment_id: str, assignment: Assignment) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, assignment_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def is_assigned(self, workspace_id: str, start: datetime, end: datetime) -> bool:
        """True iff some assignment on the workspace intersects [start, end)"""
        raise NotImplementedError

    @abstractmethod
    def is_fully_assigned(
        self,
        workspace_id: str,
        start: datetime,
        end: datetime,
        *,
        user_id: str | None = None,
    ) -> bool:
        """
        True iff assignments on the workspace (only `user_id`'s, when given)
        cover every instant of [start, end).
        """
        raise NotImplementedError

    @abstractmethod
    def expired(self, since: datetime) -> list[Assignment]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, assignment_ids: Iterable[str]) -> None:
        raise NotImplementedError
