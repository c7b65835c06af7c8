from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

import logging

from coach.api.deps import close_store
from coach.domain.errors import (
    PlanError, ValidationError, EmptySourceError, NotFoundError, InvalidTransitionError, StorageError
)
from coach.events.activity_feed import start as start_activity_feed

# Routers
from coach.api.routes import calendar, entries, nutrition, templates

# Logging
logger = logging.getLogger("coach_app")

# Plan errors -> HTTP status; checked in order, first match wins
ERROR_STATUS = (
    (ValidationError, 400),
    (EmptySourceError, 400),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
    (StorageError, 502),
)

# Initialize FastAPI app
app = FastAPI(title="Coach Planner API")

# Include routers
app.include_router(calendar.router)
app.include_router(entries.router)
app.include_router(templates.router)
app.include_router(nutrition.router)


def status_for(error: PlanError) -> int:
    for cls, status in ERROR_STATUS:
        if isinstance(error, cls):
            return status
    return 500


@app.exception_handler(PlanError)
async def plan_error_handler(request: Request, exc: PlanError):
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%d): %s", request.method, request.url.path, status, exc.message)
    return JSONResponse(status_code=status, content={"detail": exc.message})


@app.on_event("startup")
def _startup_activity_feed():
    """Register the activity feed on the event bus when the app starts."""
    start_activity_feed()
    logger.info("Activity feed for plan events started")


@app.on_event("shutdown")
async def _shutdown_store():
    await close_store()


@app.get("/api/health")
def health():
    return {"status": "ok"}
