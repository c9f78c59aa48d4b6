from logstream.schemas.source import (
    SourceDescriptorSchema, SourceSummary, SourceCatalogueUpdate, SourceCatalogueResponse,
    SupportedSourcesResponse, ValidationResponse
)
from logstream.schemas.logs import (
    StreamLogsRequest, StreamLogsResponse, UnifiedLogRecordSchema, PollStatusResponse,
    PolledLogsResponse, ActivityResponse
)
from logstream.schemas.common import ErrorResponse, SuccessResponse

__all__ = [
    "SourceDescriptorSchema", "SourceSummary", "SourceCatalogueUpdate", "SourceCatalogueResponse",
    "SupportedSourcesResponse", "ValidationResponse",
    "StreamLogsRequest", "StreamLogsResponse", "UnifiedLogRecordSchema", "PollStatusResponse",
    "PolledLogsResponse", "ActivityResponse",
    "ErrorResponse", "SuccessResponse"
]
