from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field


@dataclass(slots=True)
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class WorkspaceLocks:
    """
    Process-local mutexes keyed by workspace id.

    Write-side engine operations hold the lock for every workspace they touch
    across the availability check and the insert, so two requests on the same
    workspace can never both observe it as free. Entries are dropped once
    nobody holds or waits on them.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def _checkout(self, workspace_id: str) -> threading.Lock:
        with self._guard:
            entry = self._entries.get(workspace_id)
            if entry is None:
                entry = self._entries[workspace_id] = _Entry()
            entry.holders += 1
            return entry.lock

    def _checkin(self, workspace_id: str) -> None:
        with self._guard:
            entry = self._entries[workspace_id]
            entry.holders -= 1
            if entry.holders == 0:
                del self._entries[workspace_id]

    @contextmanager
    def hold(self, *workspace_ids: str) -> Iterator[None]:
        # Sorted acquisition keeps two-workspace updates deadlock free.
        ids = sorted(set(workspace_ids))
        locks = [self._checkout(ws_id) for ws_id in ids]
        acquired: list[threading.Lock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for ws_id in ids:
                self._checkin(ws_id)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


workspace_locks = WorkspaceLocks()
