from fastapi import APIRouter, Depends

from logstream.api.deps import get_activity_tracker
from logstream.schemas.logs import ActivityResponse
from logstream.services.logs import ActivityTracker


router = APIRouter()


@router.get("/")
async def list_active_sources(activity_tracker: ActivityTracker = Depends(get_activity_tracker)):
    return {"active": activity_tracker.active_sources()}


@router.get("/{source_id}", response_model=ActivityResponse)
async def get_source_activity(source_id: str, activity_tracker: ActivityTracker = Depends(get_activity_tracker)):
    return ActivityResponse(source_id=source_id, active=activity_tracker.has_active_stream(source_id))
