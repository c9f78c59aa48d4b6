"""
One-shot log fetch endpoint
"""

from fastapi import APIRouter, Depends

from logstream.api.deps import get_stream_service
from logstream.schemas.logs import StreamLogsRequest, StreamLogsResponse
from logstream.services.logs import StreamLogsService


router = APIRouter()


@router.post("/stream", response_model=StreamLogsResponse)
async def stream_logs(
    request: StreamLogsRequest,
    stream_service: StreamLogsService = Depends(get_stream_service)
):
    """
    Fetch logs from a source and return them in the requested format.

    Provider failures are reported in the body with ``success: false``.
    """
    result = await stream_service.stream_logs(
        request.source.to_descriptor(),
        line=request.line,
        format=request.format,
        additional_params=request.additional_params
    )
    return StreamLogsResponse(**result.to_dict())
