from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime

from hotdesk.core.entities.assignment import Assignment
from hotdesk.core.entities.booking import Booking
from hotdesk.core.entities.offering import Offering

# Sort order for events sharing a timestamp: ends first, so back-to-back
# intervals never look like they overlap.
_END = 0
_START = 1

_ASSIGNMENT = "assignment"
_OFFERING = "offering"


class _CoverageState:
    """
    Running view of one sweep position.

    Tracks, per user, how many assignments and how many live offerings are
    active, plus two aggregates so the availability predicate is O(1):
    how many users are assigned, and how many of those are also offering.
    """

    def __init__(self) -> None:
        self._assigned: Counter[str] = Counter()
        self._offered: Counter[str] = Counter()
        self.assigned_users = 0
        self.covered_users = 0

    def apply(self, kind: str, user_id: str, delta: int) -> None:
        was_assigned = self._assigned[user_id] > 0
        was_covered = was_assigned and self._offered[user_id] > 0

        if kind == _ASSIGNMENT:
            self._assigned[user_id] += delta
        else:
            self._offered[user_id] += delta

        is_assigned = self._assigned[user_id] > 0
        is_covered = is_assigned and self._offered[user_id] > 0

        self.assigned_users += int(is_assigned) - int(was_assigned)
        self.covered_users += int(is_covered) - int(was_covered)

    @property
    def satisfied(self) -> bool:
        # Nobody owns the desk right now, or an owner has released it.
        return self.assigned_users == 0 or self.covered_users > 0


def _events(
    start: datetime,
    end: datetime,
    assignments: Iterable[Assignment],
    offerings: Iterable[Offering],
) -> list[tuple[datetime, int, str, str]]:
    events: list[tuple[datetime, int, str, str]] = []

    def add(kind: str, user_id: str, s: datetime, e: datetime) -> None:
        if not (s < end and start < e):
            return
        events.append((max(s, start), _START, kind, user_id))
        if e < end:
            events.append((e, _END, kind, user_id))

    for assignment in assignments:
        add(_ASSIGNMENT, assignment.user_id, assignment.start_time, assignment.end_time)
    for offering in offerings:
        if not offering.cancelled:
            add(_OFFERING, offering.user_id, offering.start_time, offering.end_time)

    events.sort(key=lambda ev: (ev[0], ev[1]))
    return events


def is_available(
    start: datetime,
    end: datetime,
    *,
    bookings: Iterable[Booking] = (),
    assignments: Iterable[Assignment] = (),
    offerings: Iterable[Offering] = (),
) -> bool:
    """
    Decide whether one workspace is reservable by an arbitrary user for the
    whole of [start, end).

    The records passed in must all belong to the same workspace. Any live
    booking overlapping the window rejects it outright. Otherwise every
    instant covered by an assignment must also be covered by a live offering
    from one of the users assigned at that instant.

    The check is a sweep over the clipped interval endpoints: between two
    consecutive endpoints the predicate cannot change, so each sub-interval
    is evaluated once, right after the events at its left endpoint apply.
    """
    if any(not b.cancelled and b.overlaps(start, end) for b in bookings):
        return False

    events = _events(start, end, assignments, offerings)
    state = _CoverageState()

    i = 0
    while i < len(events):
        instant = events[i][0]
        while i < len(events) and events[i][0] == instant:
            _, edge, kind, user_id = events[i]
            state.apply(kind, user_id, 1 if edge == _START else -1)
            i += 1
        if not state.satisfied:
            return False

    return True


def is_available_naive(
    start: datetime,
    end: datetime,
    *,
    bookings: Sequence[Booking] = (),
    assignments: Sequence[Assignment] = (),
    offerings: Sequence[Offering] = (),
) -> bool:
    """Pairwise reference implementation of is_available, O(n^2)."""
    if any(not b.cancelled and b.overlaps(start, end) for b in bookings):
        return False

    live_offerings = [o for o in offerings if not o.cancelled]
    instants = {start}
    for record in [*assignments, *live_offerings]:
        for point in (record.start_time, record.end_time):
            if start < point < end:
                instants.add(point)

    for instant in sorted(instants):
        owners = {a.user_id for a in assignments if a.covers(instant)}
        if not owners:
            continue
        if not any(o.user_id in owners and o.covers(instant) for o in live_offerings):
            return False
    return True


def available_workspace_ids(
    workspace_ids: Iterable[str],
    start: datetime,
    end: datetime,
    *,
    bookings: Iterable[Booking] = (),
    assignments: Iterable[Assignment] = (),
    offerings: Iterable[Offering] = (),
    exclude_booking_id: str | None = None,
) -> list[str]:
    """
    Apply is_available to each workspace in `workspace_ids`, grouping the
    given records by workspace. Order of `workspace_ids` is preserved.
    """
    bookings_by_ws: dict[str, list[Booking]] = defaultdict(list)
    for booking in bookings:
        if exclude_booking_id is None or booking.id != exclude_booking_id:
            bookings_by_ws[booking.workspace_id].append(booking)

    assignments_by_ws: dict[str, list[Assignment]] = defaultdict(list)
    for assignment in assignments:
        assignments_by_ws[assignment.workspace_id].append(assignment)

    offerings_by_ws: dict[str, list[Offering]] = defaultdict(list)
    for offering in offerings:
        offerings_by_ws[offering.workspace_id].append(offering)

    return [
        ws_id
        for ws_id in workspace_ids
        if is_available(
            start,
            end,
            bookings=bookings_by_ws.get(ws_id, ()),
            assignments=assignments_by_ws.get(ws_id, ()),
            offerings=offerings_by_ws.get(ws_id, ()),
        )
    ]


def is_covered(intervals: Iterable[tuple[datetime, datetime]], start: datetime, end: datetime) -> bool:
    """True iff the union of `intervals` contains every instant of [start, end)."""
    cursor = start
    for s, e in sorted(intervals):
        if s > cursor:
            break
        if e > cursor:
            cursor = e
        if cursor >= end:
            return True
    return cursor >= end
