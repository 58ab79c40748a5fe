from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from hotdesk.core.entities.floor import Floor


class FloorRepository(ABC):
    @abstractmethod
    def get_one(self, floor_id: str) -> Floor:
        """Raises NotFoundError for unknown or soft-deleted floors"""
        raise NotImplementedError

    @abstractmethod
    def get_all(self) -> list[Floor]:
        raise NotImplementedError

    @abstractmethod
    def get_all_ids(self) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    def create(self, floor: Floor) -> str:
        raise NotImplementedError

    @abstractmethod
    def update(self, floor_id: str, floor: Floor) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, floor_id: str, *, force: bool = False) -> None:
        """
        Soft-delete a floor.

        Raises InvalidOperationError if live workspaces still reference the
        floor and `force` is False. With `force`, those workspaces are
        soft-deleted in the same transaction.
        """
        raise NotImplementedError

    @abstractmethod
    def deleted(self) -> list[Floor]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, floor_ids: Iterable[str]) -> None:
        raise NotImplementedError
