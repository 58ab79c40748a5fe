from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime

from hotdesk.core.entities.offering import ExpandedOffering, Offering


class OfferingRepository(ABC):
    @abstractmethod
    def get_one(self, offering_id: str) -> Offering:
        raise NotImplementedError

    @abstractmethod
    def get_one_expanded(self, offering_id: str) -> ExpandedOffering:
        raise NotImplementedError

    @abstractmethod
    def get_all(self) -> list[Offering]:
        raise NotImplementedError

    @abstractmethod
    def get_all_expanded(self) -> list[ExpandedOffering]:
        raise NotImplementedError

    @abstractmethod
    def by_workspace(self, workspace_id: str) -> list[Offering]:
        raise NotImplementedError

    @abstractmethod
    def by_workspace_expanded(self, workspace_id: str) -> list[ExpandedOffering]:
        raise NotImplementedError

    @abstractmethod
    def by_user(self, user_id: str) -> list[Offering]:
        raise NotImplementedError

    @abstractmethod
    def by_user_expanded(self, user_id: str) -> list[ExpandedOffering]:
        raise NotImplementedError

    @abstractmethod
    def by_range(self, start: datetime, end: datetime) -> list[Offering]:
        raise NotImplementedError

    @abstractmethod
    def by_range_expanded(self, start: datetime, end: datetime) -> list[ExpandedOffering]:
        raise NotImplementedError

    @abstractmethod
    def by_workspace_and_range(self, workspace_id: str, start: datetime, end: datetime) -> Offering:
        """
        The non-cancelled offering on `workspace_id` that covers [start, end).
        Raises EmptyError when there is none.
        """
        raise NotImplementedError

    @abstractmethod
    def overlapping_for_user(
        self,
        workspace_id: str,
        user_id: str,
        start: datetime,
        end: datetime,
        *,
        exclude_id: str | None = None,
    ) -> list[Offering]:
        raise NotImplementedError

    @abstractmethod
    def create(self, offering: Offering) -> str:
        raise NotImplementedError

    @abstractmethod
    def update(self, offering_id: str, offering: Offering) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, offering_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def expired(self, since: datetime) -> list[Offering]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, offering_ids: Iterable[str]) -> None:
        raise NotImplementedError
