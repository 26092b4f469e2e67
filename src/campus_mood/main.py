# src/campus_mood/main.py
"""Main entry point for the Campus Mood application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from campus_mood.api.v1 import (
    auth_router,
    feed_router,
    posts_router,
    reactions_router,
    stats_router,
    system_router,
    users_router,
)
from campus_mood.core.errors import (
    CampusMoodError,
    DailyLimitExceededError,
    EmailDomainNotAllowedError,
    PostValidationError,
    ReactionValidationError,
    StoreError,
)
from campus_mood.core.settings import settings
from campus_mood.db.session import SessionLocal, create_tables, engine
from campus_mood.services.container import ServiceContainer, build_services

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Campus Mood API",
    description="Anonymous campus mood sharing API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(reactions_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(stats_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")
app.include_router(feed_router, prefix="/api/v1")

ERROR_STATUS: dict[type[CampusMoodError], int] = {
    PostValidationError: status.HTTP_400_BAD_REQUEST,
    ReactionValidationError: status.HTTP_400_BAD_REQUEST,
    EmailDomainNotAllowedError: status.HTTP_403_FORBIDDEN,
    DailyLimitExceededError: status.HTTP_429_TOO_MANY_REQUESTS,
    StoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@app.exception_handler(CampusMoodError)
async def campus_mood_error_handler(request: Request, exc: CampusMoodError) -> JSONResponse:
    """Translate domain errors into JSON responses with a user-facing message."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.on_event("startup")
async def on_startup() -> None:
    if settings.create_tables_on_startup:
        await create_tables(engine)
    services = build_services(SessionLocal)
    app.state.services = services
    if settings.maintenance_enabled:
        await services.start()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    services: ServiceContainer | None = getattr(app.state, "services", None)
    if services:
        await services.close()
    await engine.dispose()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Campus Mood API",
        "version": settings.app_version,
        "description": "Anonymous campus mood sharing API",
        "docs": "/docs",
        "redoc": "/redoc"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("campus_mood.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
