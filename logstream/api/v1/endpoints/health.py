from datetime import datetime, timezone
from fastapi import APIRouter, Depends

from logstream.core.config import settings
from logstream.api.deps import get_coordinator, get_stream_service
from logstream.services.logs import LogPollingCoordinator, StreamLogsService


router = APIRouter()


@router.get("/")
async def basic_health_check(
    stream_service: StreamLogsService = Depends(get_stream_service),
    coordinator: LogPollingCoordinator = Depends(get_coordinator)
):
    return {
        "status": "healthy",
        "service": "logstream-api",
        "version": settings.app_version,
        "supported_sources": stream_service.supported_sources(),
        "registered_sources": len(coordinator.registered_sources()),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/live")
async def liveness_check():
    return {"alive": True, "timestamp": datetime.now(timezone.utc).isoformat()}
