from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import uuid

import httpx

from logstream.core.config import settings
from logstream.core.exceptions import AppException
from logstream.core.logging import logger
from logstream.api.v1.api import api_router
from logstream.services.logs import (
    ActivityTracker, FetcherRegistry, FormatterRegistry, LogPollingCoordinator, StreamLogsService
)


def build_services(client: httpx.AsyncClient = None):
    """Create the stream service, activity tracker and coordinator from settings."""
    stream_service = StreamLogsService(
        fetchers=FetcherRegistry.with_defaults(client=client),
        formatters=FormatterRegistry.with_defaults()
    )
    activity_tracker = ActivityTracker(
        inactivity_window=settings.activity_window_ms / 1000,
        sweep_interval=settings.activity_sweep_ms / 1000
    )
    coordinator = LogPollingCoordinator(
        stream_service,
        activity_tracker=activity_tracker,
        poll_interval=settings.poll_interval_ms / 1000,
        throttle_window=settings.update_throttle_ms / 1000,
        buffer_size=settings.poll_buffer_size
    )
    return stream_service, activity_tracker, coordinator


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting up...")

    client = None
    if getattr(app.state, "coordinator", None) is None:
        client = httpx.AsyncClient(
            timeout=settings.http_timeout,
            headers={"User-Agent": settings.user_agent}
        )
        stream_service, activity_tracker, coordinator = build_services(client)
        app.state.stream_service = stream_service
        app.state.activity_tracker = activity_tracker
        app.state.coordinator = coordinator

    await app.state.activity_tracker.start()
    await app.state.coordinator.start()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await app.state.coordinator.stop()
    await app.state.activity_tracker.stop()
    if client is not None:
        await client.aclose()
        app.state.stream_service = None
        app.state.activity_tracker = None
        app.state.coordinator = None


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    openapi_url=f"{settings.api_v1_str}/openapi.json",
    docs_url=f"{settings.api_v1_str}/docs",
    redoc_url=f"{settings.api_v1_str}/redoc",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# Request ID middleware
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


# Global exception handler
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message}")
    else:
        logger.warning(f"{exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": str(exc),
                "details": exc.details
            },
            "status": "error",
            "request_id": getattr(request.state, "request_id", None)
        }
    )


# Include API router
app.include_router(api_router, prefix=settings.api_v1_str)


@app.get("/")
async def root():
    return {
        "message": "Logstream API",
        "version": settings.app_version,
        "docs": f"{settings.api_v1_str}/docs"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
