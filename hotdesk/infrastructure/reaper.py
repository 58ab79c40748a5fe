from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from datetime import datetime

import structlog
from starlette.concurrency import run_in_threadpool

from hotdesk.core.repositories.data_store import DataStore
from hotdesk.core.use_cases.reap_expired import ReapExpiredUseCase, ReapResult
from hotdesk.infrastructure.repositories.base import utcnow

logger = structlog.get_logger(__name__)


class ReaperRunner:
    """
    Periodic driver for ReapExpiredUseCase.

    Each tick opens its own store, runs in the threadpool so request handling
    is never blocked, and logs and swallows its failure; the next tick starts
    over from fresh queries.
    """

    def __init__(
        self,
        *,
        store_factory: Callable[[], DataStore],
        period_seconds: float = 60.0,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store_factory = store_factory
        self._period = period_seconds
        self._clock = clock
        self._task: asyncio.Task | None = None

    def run_once(self) -> ReapResult | None:
        store = None
        try:
            store = self._store_factory()
            return ReapExpiredUseCase(store=store).execute(now=self._clock())
        except Exception:
            logger.exception("reaper_tick_failed")
            return None
        finally:
            if store is not None:
                store.close()

    async def run_forever(self) -> None:
        while True:
            await run_in_threadpool(self.run_once)
            await asyncio.sleep(self._period)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self.run_forever())
        logger.info("reaper_started", period_seconds=self._period)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("reaper_stopped")
