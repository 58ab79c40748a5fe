from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hotdesk.core.errors import (
    ConflictError,
    DeadlineExceeded,
    HotdeskError,
    InvalidOperationError,
    NotFoundError,
    StorageFault,
    UpstreamFault,
    ValidationError,
)

logger = structlog.get_logger(__name__)

STATUS_BY_ERROR: list[tuple[type[HotdeskError], int]] = [
    (ValidationError, 400),
    (NotFoundError, 404),  # EmptyError included
    (InvalidOperationError, 403),
    (ConflictError, 409),
    (StorageFault, 500),
    (UpstreamFault, 500),
    (DeadlineExceeded, 504),
]


def status_for(exc: HotdeskError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def _operation(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "name", None) or f"{request.method} {request.url.path}"


def _failure(request: Request, status_code: int, detail, *, error: str | None = None) -> JSONResponse:
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request_failed",
        operation=_operation(request),
        method=request.method,
        path=request.url.path,
        status_code=status_code,
        detail=error or (detail if isinstance(detail, str) else repr(detail)),
    )
    return JSONResponse(status_code=status_code, content={"detail": detail})


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HotdeskError)
    async def hotdesk_error_handler(request: Request, exc: HotdeskError) -> JSONResponse:
        status_code = status_for(exc)
        if isinstance(exc, DeadlineExceeded):
            return _failure(request, status_code, "Request timed out", error=str(exc))
        if status_code >= 500:
            # Storage and upstream details stay in the log
            return _failure(request, status_code, "Internal server error", error=str(exc))
        return _failure(request, status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _failure(request, 400, jsonable_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _failure(request, exc.status_code, exc.detail)


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
