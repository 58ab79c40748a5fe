from __future__ import annotations

from datetime import datetime

from hotdesk.core.entities.booking import Booking, ExpandedBooking
from hotdesk.core.entities.interval import overlaps, require_window
from hotdesk.core.entities.offering import ExpandedOffering, Offering
from hotdesk.core.errors import ValidationError
from hotdesk.core.repositories.booking_repository import BookingRepository
from hotdesk.core.repositories.offering_repository import OfferingRepository


def _record(item) -> Booking | Offering:
    if isinstance(item, ExpandedBooking):
        return item.booking
    if isinstance(item, ExpandedOffering):
        return item.offering
    return item


def list_windows(
    repo: BookingRepository | OfferingRepository,
    *,
    expanded: bool = False,
    user_id: str | None = None,
    workspace_id: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list:
    """
    Resolve the list filters of GET /bookings and GET /offerings.

    The most selective filter picks the indexed query; the others are
    applied to its result.
    """
    if (start is None) != (end is None):
        raise ValidationError("start and end must be given together")
    if start is not None:
        start, end = require_window(start, end)

    suffix = "_expanded" if expanded else ""
    if workspace_id is not None:
        items = getattr(repo, f"by_workspace{suffix}")(workspace_id)
    elif user_id is not None:
        items = getattr(repo, f"by_user{suffix}")(user_id)
    elif start is not None:
        items = getattr(repo, f"by_range{suffix}")(start, end)
    else:
        items = getattr(repo, f"get_all{suffix}")()

    def keep(item) -> bool:
        record = _record(item)
        if user_id is not None and record.user_id != user_id:
            return False
        if start is not None and not overlaps(record.start_time, record.end_time, start, end):
            return False
        return True

    return [item for item in items if keep(item)]
