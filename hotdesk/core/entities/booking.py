from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from hotdesk.core.entities.interval import overlaps


@dataclass(slots=True)
class Booking:
    workspace_id: str
    user_id: str
    start_time: datetime
    end_time: datetime
    cancelled: bool = False
    created_by: str = ""
    id: str = ""

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return overlaps(self.start_time, self.end_time, start, end)

    def cancel(self) -> bool:
        """Returns False when the booking was already cancelled."""
        if self.cancelled:
            return False
        self.cancelled = True
        return True


@dataclass(slots=True)
class ExpandedBooking:
    """Booking joined with its workspace, floor and user names. Never written."""
    booking: Booking
    workspace_name: str
    user_name: str
    floor_id: str
    floor_name: str
