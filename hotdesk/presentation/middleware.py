from __future__ import annotations

import asyncio

import structlog
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from hotdesk.core.deadline import deadline_after

logger = structlog.get_logger(__name__)


class TimeoutMiddleware(BaseHTTPMiddleware):
    """
    Answers 504 once a request outlives its deadline.

    The deadline is also published to the handler's context. A handler
    already running in the threadpool cannot be interrupted, so the engine
    and the stores check it before every commit and abandon the write once
    it has passed. A write that committed in time stays committed.
    """

    def __init__(self, app, timeout_seconds: float) -> None:
        super().__init__(app)
        self._timeout = timeout_seconds

    async def dispatch(self, request: Request, call_next):
        # Set before call_next so the app task copies it into its context
        with deadline_after(self._timeout):
            try:
                return await asyncio.wait_for(call_next(request), timeout=self._timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "request_timeout",
                    method=request.method,
                    path=request.url.path,
                    timeout_seconds=self._timeout,
                )
                return JSONResponse(status_code=504, content={"detail": "Request timed out"})
