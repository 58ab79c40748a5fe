from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime

from hotdesk.core.entities.booking import Booking, ExpandedBooking


class BookingRepository(ABC):
    @abstractmethod
    def get_one(self, booking_id: str) -> Booking:
        raise NotImplementedError

    @abstractmethod
    def get_one_expanded(self, booking_id: str) -> ExpandedBooking:
        raise NotImplementedError

    @abstractmethod
    def get_all(self) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    def get_all_expanded(self) -> list[ExpandedBooking]:
        raise NotImplementedError

    @abstractmethod
    def by_workspace(self, workspace_id: str) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    def by_workspace_expanded(self, workspace_id: str) -> list[ExpandedBooking]:
        raise NotImplementedError

    @abstractmethod
    def by_user(self, user_id: str) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    def by_user_expanded(self, user_id: str) -> list[ExpandedBooking]:
        raise NotImplementedError

    @abstractmethod
    def by_range(self, start: datetime, end: datetime) -> list[Booking]:
        """Bookings overlapping [start, end)"""
        raise NotImplementedError

    @abstractmethod
    def by_range_expanded(self, start: datetime, end: datetime) -> list[ExpandedBooking]:
        raise NotImplementedError

    @abstractmethod
    def overlapping(
        self,
        workspace_id: str,
        start: datetime,
        end: datetime,
        *,
        exclude_id: str | None = None,
    ) -> list[Booking]:
        """Non-cancelled bookings on `workspace_id` overlapping [start, end)"""
        raise NotImplementedError

    @abstractmethod
    def create(self, booking: Booking) -> str:
        raise NotImplementedError

    @abstractmethod
    def update(self, booking_id: str, booking: Booking) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, booking_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def expired(self, since: datetime) -> list[Booking]:
        """Bookings whose end_time is before `since`"""
        raise NotImplementedError

    @abstractmethod
    def delete(self, booking_ids: Iterable[str]) -> None:
        raise NotImplementedError
