"""
Polling registration and buffer endpoints
"""

from typing import Dict
from fastapi import APIRouter, Depends

from logstream.api.deps import get_coordinator
from logstream.core.exceptions import SourceNotFoundError
from logstream.schemas.common import SuccessResponse
from logstream.schemas.logs import PolledLogsResponse, PollStatusResponse
from logstream.services.logs import LogPollingCoordinator


router = APIRouter()


@router.get("/", response_model=Dict[str, PollStatusResponse])
async def list_polling_sources(coordinator: LogPollingCoordinator = Depends(get_coordinator)):
    return coordinator.get_status()


@router.post("/{source_id}", response_model=PollStatusResponse)
async def register_source(source_id: str, coordinator: LogPollingCoordinator = Depends(get_coordinator)):
    """Start polling a catalogued source; the first fetch seeds its buffer"""
    await coordinator.register_source(source_id)
    return coordinator.get_status()[source_id]


@router.delete("/{source_id}", response_model=SuccessResponse)
async def unregister_source(source_id: str, coordinator: LogPollingCoordinator = Depends(get_coordinator)):
    if not await coordinator.unregister_source(source_id):
        raise SourceNotFoundError(source_id)
    return SuccessResponse(message=f"Stopped polling {source_id}")


@router.get("/{source_id}/logs", response_model=PolledLogsResponse)
async def get_source_logs(source_id: str, coordinator: LogPollingCoordinator = Depends(get_coordinator)):
    records = coordinator.get_logs(source_id)
    return PolledLogsResponse(
        source_id=source_id,
        count=len(records),
        logs=[record.to_dict() for record in records]
    )


@router.delete("/{source_id}/logs", response_model=SuccessResponse)
async def clear_source_logs(source_id: str, coordinator: LogPollingCoordinator = Depends(get_coordinator)):
    await coordinator.clear_logs(source_id)
    return SuccessResponse(message=f"Cleared logs for {source_id}")
