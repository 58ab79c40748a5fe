from __future__ import annotations

import threading
import time

import pytest
from conftest import Office, assign, at

from hotdesk.core.deadline import deadline_after
from hotdesk.core.errors import (
    ConflictError,
    DeadlineExceeded,
    InvalidOperationError,
    NotFoundError,
    ValidationError,
)
from hotdesk.core.repositories.data_store import DataStore
from hotdesk.core.use_cases.offer_workspace import (
    CancelOfferingUseCase,
    CreateDefaultOfferingUseCase,
    CreateOfferingUseCase,
    UpdateOfferingUseCase,
)
from hotdesk.core.use_cases.reserve_workspace import (
    CancelBookingUseCase,
    CreateBookingUseCase,
    UpdateBookingUseCase,
)
from hotdesk.core.use_cases.workspace_locks import WorkspaceLocks


@pytest.fixture()
def locks() -> WorkspaceLocks:
    return WorkspaceLocks()


def _book(store: DataStore, locks: WorkspaceLocks, workspace_id: str, user_id: str, start, end):
    return CreateBookingUseCase(store=store, locks=locks).execute(
        workspace_id=workspace_id, user_id=user_id, start=start, end=end
    )


def _offer(store: DataStore, locks: WorkspaceLocks, workspace_id: str, user_id: str, start, end):
    return CreateOfferingUseCase(store=store, locks=locks).execute(
        workspace_id=workspace_id, user_id=user_id, start=start, end=end
    )


def test_bare_booking_then_overlap_conflicts(store: DataStore, office: Office, locks: WorkspaceLocks) -> None:
    booking = _book(store, locks, office.desk, office.visitor, at(9), at(10))
    assert booking.id
    assert booking.created_by == office.visitor

    with pytest.raises(ConflictError):
        _book(store, locks, office.desk, office.colleague, at(9.5), at(10.5))

    # Back to back is fine
    _book(store, locks, office.desk, office.colleague, at(10), at(11))


def test_booking_validates_window(store: DataStore, office: Office, locks: WorkspaceLocks) -> None:
    with pytest.raises(ValidationError):
        _book(store, locks, office.desk, office.visitor, at(10), at(9))
    with pytest.raises(ValidationError):
        _book(store, locks, office.desk, office.visitor, at(10), at(10))


def test_booking_requires_live_workspace_and_known_user(
    store: DataStore, office: Office, locks: WorkspaceLocks
) -> None:
    with pytest.raises(NotFoundError):
        _book(store, locks, "ws-missing", office.visitor, at(9), at(10))
    with pytest.raises(NotFoundError):
        _book(store, locks, office.desk, "u-missing", at(9), at(10))

    store.workspaces.remove(office.other_desk)
    with pytest.raises(NotFoundError):
        _book(store, locks, office.other_desk, office.visitor, at(9), at(10))


def test_assignment_blocks_pool_until_offered(store: DataStore, office: Office, locks: WorkspaceLocks) -> None:
    assign(store, office.desk, office.owner, at(0), at(24 * 300))

    with pytest.raises(ConflictError):
        _book(store, locks, office.desk, office.colleague, at(9), at(10))

    _offer(store, locks, office.desk, office.owner, at(9), at(10))
    booking = _book(store, locks, office.desk, office.colleague, at(9), at(10))
    assert not booking.cancelled

    # The offering does not stretch to cover a longer window
    with pytest.raises(ConflictError):
        _book(store, locks, office.desk, office.visitor, at(10), at(11))


def test_offering_without_assignment_conflicts(store: DataStore, office: Office, locks: WorkspaceLocks) -> None:
    with pytest.raises(ConflictError):
        _offer(store, locks, office.desk, office.owner, at(9), at(10))


def test_offering_must_be_fully_covered_by_own_assignment(
    store: DataStore, office: Office, locks: WorkspaceLocks
) -> None:
    assign(store, office.desk, office.owner, at(0), at(12))
    assign(store, office.desk, office.colleague, at(12), at(24))

    with pytest.raises(ConflictError):
        _offer(store, locks, office.desk, office.owner, at(11), at(13))
    with pytest.raises(ConflictError):
        _offer(store, locks, office.desk, office.colleague, at(9), at(10))

    assign(store, office.desk, office.owner, at(12), at(14))
    offering = _offer(store, locks, office.desk, office.owner, at(11), at(13))
    assert offering.user_id == office.owner


def test_overlapping_offerings_by_same_user_conflict(
    store: DataStore, office: Office, locks: WorkspaceLocks
) -> None:
    assign(store, office.desk, office.owner, at(0), at(24))
    _offer(store, locks, office.desk, office.owner, at(9), at(12))

    with pytest.raises(ConflictError):
        _offer(store, locks, office.desk, office.owner, at(11), at(13))
    _offer(store, locks, office.desk, office.owner, at(12), at(13))


def test_cancel_booking_is_idempotent(store: DataStore, office: Office, locks: WorkspaceLocks) -> None:
    booking = _book(store, locks, office.desk, office.visitor, at(9), at(10))
    cancel = CancelBookingUseCase(store=store, locks=locks)

    first = cancel.execute(booking_id=booking.id)
    second = cancel.execute(booking_id=booking.id)

    assert first.cancelled and second.cancelled
    assert store.bookings.get_one(booking.id).cancelled
    assert len(store.bookings.get_all()) == 1
    # The slot is free again
    _book(store, locks, office.desk, office.colleague, at(9), at(10))


def test_cancelling_offering_keeps_accepted_booking(
    store: DataStore, office: Office, locks: WorkspaceLocks
) -> None:
    assign(store, office.desk, office.owner, at(0), at(24))
    offering = _offer(store, locks, office.desk, office.owner, at(9), at(12))
    booking = _book(store, locks, office.desk, office.colleague, at(9), at(10))

    CancelOfferingUseCase(store=store, locks=locks).execute(offering_id=offering.id)
    CancelOfferingUseCase(store=store, locks=locks).execute(offering_id=offering.id)

    assert store.offerings.get_one(offering.id).cancelled
    assert not store.bookings.get_one(booking.id).cancelled
    with pytest.raises(ConflictError):
        _book(store, locks, office.desk, office.visitor, at(10), at(11))


def test_update_booking_moves_window(store: DataStore, office: Office, locks: WorkspaceLocks) -> None:
    booking = _book(store, locks, office.desk, office.visitor, at(9), at(10))
    update = UpdateBookingUseCase(store=store, locks=locks)

    # Overlapping its own old window is allowed
    moved = update.execute(booking_id=booking.id, start=at(9.5), end=at(10.5))
    assert (moved.start_time, moved.end_time) == (at(9.5), at(10.5))
    assert store.bookings.get_one(booking.id).end_time == at(10.5)


def test_failed_update_leaves_booking_untouched(store: DataStore, office: Office, locks: WorkspaceLocks) -> None:
    mine = _book(store, locks, office.desk, office.visitor, at(9), at(10))
    _book(store, locks, office.desk, office.colleague, at(11), at(12))
    update = UpdateBookingUseCase(store=store, locks=locks)

    with pytest.raises(ConflictError):
        update.execute(booking_id=mine.id, start=at(10), end=at(11.5))
    with pytest.raises(ValidationError):
        update.execute(booking_id=mine.id, end=at(8))

    unchanged = store.bookings.get_one(mine.id)
    assert (unchanged.start_time, unchanged.end_time) == (at(9), at(10))
    assert not unchanged.cancelled


def test_update_booking_across_workspaces(store: DataStore, office: Office, locks: WorkspaceLocks) -> None:
    booking = _book(store, locks, office.desk, office.visitor, at(9), at(10))
    _book(store, locks, office.other_desk, office.colleague, at(9), at(10))
    update = UpdateBookingUseCase(store=store, locks=locks)

    with pytest.raises(ConflictError):
        update.execute(booking_id=booking.id, workspace_id=office.other_desk)

    moved = update.execute(booking_id=booking.id, workspace_id=office.other_desk, start=at(10), end=at(11))
    assert moved.workspace_id == office.other_desk
    # The original desk is free again
    _book(store, locks, office.desk, office.owner, at(9), at(10))
    assert len(locks) == 0


def test_cancelled_booking_cannot_be_changed(store: DataStore, office: Office, locks: WorkspaceLocks) -> None:
    booking = _book(store, locks, office.desk, office.visitor, at(9), at(10))
    update = UpdateBookingUseCase(store=store, locks=locks)

    cancelled = update.execute(booking_id=booking.id, cancelled=True)
    assert cancelled.cancelled

    with pytest.raises(InvalidOperationError):
        update.execute(booking_id=booking.id, cancelled=False)
    with pytest.raises(InvalidOperationError):
        update.execute(booking_id=booking.id, start=at(11), end=at(12))
    assert store.bookings.get_one(booking.id).cancelled


def test_update_offering_rechecks_assignment(store: DataStore, office: Office, locks: WorkspaceLocks) -> None:
    assign(store, office.desk, office.owner, at(0), at(12))
    offering = _offer(store, locks, office.desk, office.owner, at(9), at(10))
    update = UpdateOfferingUseCase(store=store, locks=locks)

    widened = update.execute(offering_id=offering.id, start=at(8), end=at(11))
    assert (widened.start_time, widened.end_time) == (at(8), at(11))

    with pytest.raises(ConflictError):
        update.execute(offering_id=offering.id, end=at(13))
    assert store.offerings.get_one(offering.id).end_time == at(11)


def test_default_offering_is_idempotent(store: DataStore, office: Office, locks: WorkspaceLocks) -> None:
    assignment = assign(store, office.desk, office.owner, at(0), at(24))
    use_case = CreateDefaultOfferingUseCase(store=store, locks=locks)

    first = use_case.execute(assignment=assignment)
    second = use_case.execute(assignment=assignment)

    assert first.id == second.id
    assert [o.id for o in store.offerings.get_all()] == [first.id]
    _book(store, locks, office.desk, office.visitor, at(9), at(17))


def test_availability_round_trips_with_create_booking(
    store: DataStore, office: Office, locks: WorkspaceLocks
) -> None:
    assign(store, office.desk, office.owner, at(0), at(24))
    _offer(store, locks, office.desk, office.owner, at(8), at(12))
    _book(store, locks, office.other_desk, office.visitor, at(13), at(14))

    for start, end in [(at(8), at(9)), (at(11), at(13)), (at(13), at(15)), (at(20), at(21))]:
        available = set(store.workspaces.available(office.floor_id, start, end))
        for workspace_id in (office.desk, office.other_desk):
            try:
                booking = _book(store, locks, workspace_id, office.colleague, start, end)
            except ConflictError:
                assert workspace_id not in available
            else:
                assert workspace_id in available
                CancelBookingUseCase(store=store, locks=locks).execute(booking_id=booking.id)


def test_cancel_landing_before_booking_update_wins(
    store: DataStore, office: Office, locks: WorkspaceLocks, monkeypatch: pytest.MonkeyPatch
) -> None:
    booking = _book(store, locks, office.desk, office.visitor, at(9), at(10))
    original_get_one = store.bookings.get_one

    def get_one_then_cancel(booking_id: str):
        found = original_get_one(booking_id)
        monkeypatch.setattr(store.bookings, "get_one", original_get_one)
        CancelBookingUseCase(store=store, locks=locks).execute(booking_id=booking_id)
        return found

    monkeypatch.setattr(store.bookings, "get_one", get_one_then_cancel)

    with pytest.raises(InvalidOperationError):
        UpdateBookingUseCase(store=store, locks=locks).execute(booking_id=booking.id, start=at(13), end=at(14))

    stored = store.bookings.get_one(booking.id)
    assert stored.cancelled
    assert (stored.start_time, stored.end_time) == (at(9), at(10))
    assert len(locks) == 0


def test_cancel_landing_before_offering_update_wins(
    store: DataStore, office: Office, locks: WorkspaceLocks, monkeypatch: pytest.MonkeyPatch
) -> None:
    assign(store, office.desk, office.owner, at(0), at(24))
    offering = _offer(store, locks, office.desk, office.owner, at(9), at(12))
    original_get_one = store.offerings.get_one

    def get_one_then_cancel(offering_id: str):
        found = original_get_one(offering_id)
        monkeypatch.setattr(store.offerings, "get_one", original_get_one)
        CancelOfferingUseCase(store=store, locks=locks).execute(offering_id=offering_id)
        return found

    monkeypatch.setattr(store.offerings, "get_one", get_one_then_cancel)

    with pytest.raises(InvalidOperationError):
        UpdateOfferingUseCase(store=store, locks=locks).execute(offering_id=offering.id, end=at(11))

    stored = store.offerings.get_one(offering.id)
    assert stored.cancelled
    assert stored.end_time == at(12)


def test_booking_abandoned_once_deadline_passes(
    store: DataStore, office: Office, locks: WorkspaceLocks, monkeypatch: pytest.MonkeyPatch
) -> None:
    original_available = store.workspaces.available

    def slow_available(*args, **kwargs):
        time.sleep(0.1)
        return original_available(*args, **kwargs)

    monkeypatch.setattr(store.workspaces, "available", slow_available)

    with deadline_after(0.05):
        with pytest.raises(DeadlineExceeded):
            _book(store, locks, office.desk, office.visitor, at(9), at(10))

    assert store.bookings.get_all() == []
    assert len(locks) == 0
    # Without a deadline the same request goes through
    _book(store, locks, office.desk, office.visitor, at(9), at(10))


def test_offering_update_abandoned_once_deadline_passes(
    store: DataStore, office: Office, locks: WorkspaceLocks
) -> None:
    assign(store, office.desk, office.owner, at(0), at(24))
    offering = _offer(store, locks, office.desk, office.owner, at(9), at(12))

    with deadline_after(0):
        with pytest.raises(DeadlineExceeded):
            UpdateOfferingUseCase(store=store, locks=locks).execute(offering_id=offering.id, end=at(11))
        with pytest.raises(DeadlineExceeded):
            CancelOfferingUseCase(store=store, locks=locks).execute(offering_id=offering.id)

    stored = store.offerings.get_one(offering.id)
    assert stored.end_time == at(12)
    assert not stored.cancelled


def test_concurrent_bookings_on_one_workspace_admit_exactly_one(
    store: DataStore, office: Office, locks: WorkspaceLocks
) -> None:
    barrier = threading.Barrier(8)
    outcomes: list[str] = []
    outcomes_lock = threading.Lock()

    def worker(i: int) -> None:
        barrier.wait()
        try:
            _book(store, locks, office.desk, office.visitor, at(9 + i * 0.1), at(10 + i * 0.1))
            result = "ok"
        except ConflictError:
            result = "conflict"
        with outcomes_lock:
            outcomes.append(result)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("conflict") == 7
    live = [b for b in store.bookings.by_workspace(office.desk) if not b.cancelled]
    assert len(live) == 1
    assert len(locks) == 0


def test_locks_are_taken_in_sorted_order() -> None:
    locks = WorkspaceLocks()
    done = threading.Event()

    def other_direction() -> None:
        for _ in range(200):
            with locks.hold("ws-b", "ws-a"):
                pass
        done.set()

    t = threading.Thread(target=other_direction)
    t.start()
    for _ in range(200):
        with locks.hold("ws-a", "ws-b"):
            pass
    t.join(timeout=5)

    assert done.is_set()
    assert len(locks) == 0
