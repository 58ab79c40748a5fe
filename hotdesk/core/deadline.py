from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from hotdesk.core.errors import DeadlineExceeded

_deadline: ContextVar[float | None] = ContextVar("hotdesk_deadline", default=None)


@contextmanager
def deadline_after(seconds: float) -> Iterator[float]:
    """
    Bound the work done in the current context to ``seconds`` from now.

    The deadline is a ``time.monotonic()`` instant. It travels with the
    context, so sync handlers dispatched to the threadpool see it too.
    """
    expires_at = time.monotonic() + seconds
    token = _deadline.set(expires_at)
    try:
        yield expires_at
    finally:
        _deadline.reset(token)


def check_deadline(operation: str = "write") -> None:
    """Raise DeadlineExceeded when the current context's deadline has passed."""
    expires_at = _deadline.get()
    if expires_at is not None and time.monotonic() >= expires_at:
        raise DeadlineExceeded(f"Request deadline passed before {operation}")
