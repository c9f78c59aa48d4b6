"""
Log streaming and polling schemas
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field

from logstream.services.logs.base import OutputFormat
from .source import SourceDescriptorSchema


class StreamLogsRequest(BaseModel):
    """One-shot fetch request"""
    source: SourceDescriptorSchema
    line: Optional[int] = Field(None, ge=1, description="Number of entries to fetch")
    format: OutputFormat = Field(OutputFormat.JSON, description="text, json or unified")
    additional_params: Optional[Dict[str, Any]] = Field(None, alias="additionalParams")

    class Config:
        populate_by_name = True


class UnifiedLogRecordSchema(BaseModel):
    id: str
    timestamp: str
    source: str
    level: str
    message: str
    meta: Dict[str, Any] = Field(default_factory=dict)


class StreamLogsResponse(BaseModel):
    success: bool
    data: Union[str, List[Dict[str, Any]], None] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PollStatusResponse(BaseModel):
    status: str
    last_seen_id: Optional[str] = None
    buffer_size: int = 0
    last_error: Optional[str] = None
    last_polled_at: Optional[str] = None
    registered_at: str
    poll_in_flight: bool = False
    active: bool = False


class PolledLogsResponse(BaseModel):
    source_id: str
    count: int
    logs: List[UnifiedLogRecordSchema]


class ActivityResponse(BaseModel):
    source_id: str
    active: bool
