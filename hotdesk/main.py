from __future__ import annotations

import structlog
import uvicorn
from fastapi import FastAPI

import hotdesk.infrastructure.models.models  # noqa: F401  registers the tables on Base
from hotdesk.infrastructure.config import settings
from hotdesk.infrastructure.database import Base, SessionLocal, engine
from hotdesk.infrastructure.logging import RequestIdMiddleware, setup_logging
from hotdesk.infrastructure.reaper import ReaperRunner
from hotdesk.infrastructure.repositories.sql_store import build_sql_store
from hotdesk.presentation import bookings, directory, floors, offerings, workspaces
from hotdesk.presentation.errors import register_error_handlers
from hotdesk.presentation.middleware import TimeoutMiddleware

logger = structlog.get_logger(__name__)

app = FastAPI(title="hotdesk", version="1.0.0")

reaper = ReaperRunner(
    store_factory=lambda: build_sql_store(SessionLocal()),
    period_seconds=settings.reaper.period_seconds,
)


@app.on_event("startup")
async def _start_reaper_on_startup() -> None:
    """
    Configure logging, then start the expiry reaper unless it is disabled.
    The first tick runs immediately so records that expired while the
    service was down are removed before the first period elapses.
    """
    setup_logging(settings.log_level)
    if settings.reaper.enabled:
        reaper.start()
    logger.info("service_started", storage=engine.url.get_backend_name(), reaper=settings.reaper.enabled)


@app.on_event("shutdown")
async def _stop_reaper_on_shutdown() -> None:
    await reaper.stop()


@app.get("/", tags=["health"])
def get_health() -> dict:
    return {"status": "ok", "service": "hotdesk"}


Base.metadata.create_all(bind=engine)
app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.http.request_timeout_seconds)
app.add_middleware(RequestIdMiddleware)
register_error_handlers(app)
for module in (floors, workspaces, bookings, offerings, directory):
    app.include_router(module.router)


def run() -> None:
    uvicorn.run(app, host=settings.http.host, port=settings.http.port)


if __name__ == "__main__":
    run()
