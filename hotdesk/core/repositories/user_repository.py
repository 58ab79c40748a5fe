from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from hotdesk.core.entities.user import User, UserAssignment


class UserRepository(ABC):
    @abstractmethod
    def get_one(self, user_id: str) -> User:
        raise NotImplementedError

    @abstractmethod
    def get_all(self) -> list[User]:
        raise NotImplementedError

    @abstractmethod
    def create(self, user: User) -> str:
        raise NotImplementedError

    @abstractmethod
    def update(self, user_id: str, user: User) -> None:
        raise NotImplementedError

    @abstractmethod
    def assigned_in_range(self, start: datetime, end: datetime) -> list[UserAssignment]:
        """Users holding an assignment that overlaps [start, end)"""
        raise NotImplementedError

    @abstractmethod
    def assigned_at(self, instant: datetime) -> list[UserAssignment]:
        raise NotImplementedError
