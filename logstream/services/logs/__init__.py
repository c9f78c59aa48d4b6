"""
Unified log aggregation.

Fetchers retrieve raw provider payloads, formatters normalize them into
UnifiedLogRecords, the stream service composes the two, and the polling
coordinator and activity tracker keep registered sources up to date.
"""

from .activity import ActivityTracker
from .base import (
    FetchErrorType,
    FetchResult,
    LogLevel,
    LogSourceType,
    OutputFormat,
    SourceDescriptor,
    StreamResult,
    UnifiedLogRecord,
    UnifiedLogRecordBuilder,
)
from .fetchers import Fetcher, FetcherRegistry
from .formatters import Formatter, FormatterRegistry
from .poll_coordinator import LogPollingCoordinator, select_new_records
from .stream_service import StreamLogsService

__all__ = [
    'ActivityTracker',
    'FetchErrorType',
    'FetchResult',
    'LogLevel',
    'LogSourceType',
    'OutputFormat',
    'SourceDescriptor',
    'StreamResult',
    'UnifiedLogRecord',
    'UnifiedLogRecordBuilder',
    'Fetcher',
    'FetcherRegistry',
    'Formatter',
    'FormatterRegistry',
    'LogPollingCoordinator',
    'select_new_records',
    'StreamLogsService'
]
