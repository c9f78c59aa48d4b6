"""
Base types for the unified log pipeline.

This module defines the canonical log record every provider is normalized
into, the descriptor the host hands us for each configured source, and the
result envelopes returned by fetchers and the stream service.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from logstream.core.exceptions import RecordValidationError


class LogLevel(str, Enum):
    """Levels a unified record can carry"""
    INFO = "info"
    ERROR = "error"
    WARN = "warn"
    DEBUG = "debug"


class LogSourceType(str, Enum):
    """Providers the aggregation core knows how to read"""
    COOLIFY = "coolify"
    SENTRY = "sentry"
    STRIPE = "stripe"
    CLOUDWATCH = "cloudwatch"
    GCP = "gcp"
    NEWRELIC = "newrelic"
    VERCEL = "vercel"


class OutputFormat(str, Enum):
    """Representations the stream service can hand back"""
    TEXT = "text"
    JSON = "json"
    UNIFIED = "unified"


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class UnifiedLogRecord:
    """
    Canonical log record shared by every provider.

    Records are immutable; use UnifiedLogRecordBuilder to construct them so
    that missing ids and timestamps are synthesized consistently.
    """
    id: str
    timestamp: str
    source: LogSourceType
    level: LogLevel
    message: str
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-object projection for JSON serialization"""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "source": self.source.value,
            "level": self.level.value,
            "message": self.message,
            "meta": dict(self.meta),
        }

    def __str__(self) -> str:
        level_display = self.level.value.upper().ljust(5)
        return f"[{self.timestamp}] {level_display} [{self.source.value}] {self.message}"


class UnifiedLogRecordBuilder:
    """Fluent builder for UnifiedLogRecord"""

    def __init__(self):
        self._data: Dict[str, Any] = {}

    @classmethod
    def create(cls) -> "UnifiedLogRecordBuilder":
        return cls()

    def with_id(self, record_id: Optional[str] = None) -> "UnifiedLogRecordBuilder":
        self._data["id"] = str(record_id) if record_id else str(uuid.uuid4())
        return self

    def with_timestamp(self, timestamp: Optional[str] = None) -> "UnifiedLogRecordBuilder":
        self._data["timestamp"] = timestamp or utc_now_iso()
        return self

    def with_source(self, source: Union[LogSourceType, str]) -> "UnifiedLogRecordBuilder":
        self._data["source"] = LogSourceType(source)
        return self

    def with_level(self, level: Union[LogLevel, str]) -> "UnifiedLogRecordBuilder":
        self._data["level"] = LogLevel(level)
        return self

    def with_message(self, message: str) -> "UnifiedLogRecordBuilder":
        self._data["message"] = message
        return self

    def with_meta(self, meta: Optional[Dict[str, Any]]) -> "UnifiedLogRecordBuilder":
        # Providers hand back sparse objects; absent keys are noise
        self._data["meta"] = {k: v for k, v in (meta or {}).items() if v is not None}
        return self

    def build(self) -> UnifiedLogRecord:
        missing = [name for name in ("source", "level", "message") if not self._data.get(name)]
        if missing:
            raise RecordValidationError(missing)

        return UnifiedLogRecord(
            id=self._data.get("id") or str(uuid.uuid4()),
            timestamp=self._data.get("timestamp") or utc_now_iso(),
            source=self._data["source"],
            level=self._data["level"],
            message=self._data["message"],
            meta=self._data.get("meta", {}),
        )


@dataclass
class SourceDescriptor:
    """
    A configured provider instance as supplied by the host.

    The core only reads descriptors; it never mutates or persists them.
    """
    id: str
    slug: str
    name: str = ""
    config: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourceDescriptor":
        return cls(
            id=str(data.get("id") or data.get("slug") or ""),
            slug=str(data.get("slug") or ""),
            name=str(data.get("name") or ""),
            config=dict(data.get("config") or {}),
        )


class FetchErrorType(str, Enum):
    """Failure classes a fetcher reports"""
    INVALID_CONFIG = "invalid_config"
    NETWORK_ERROR = "network_error"
    PARSE_ERROR = "parse_error"
    UPSTREAM_ERROR = "upstream_error"


@dataclass(frozen=True)
class FetchResult:
    """
    Outcome of a provider fetch.

    Build instances through ok() and fail() so data and error always agree
    with the success flag.
    """
    success: bool
    data: Any = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any, metadata: Optional[Dict[str, Any]] = None) -> "FetchResult":
        return cls(success=True, data=data, error=None, metadata=dict(metadata or {}))

    @classmethod
    def fail(
        cls,
        error: str,
        metadata: Optional[Dict[str, Any]] = None,
        error_type: Optional[FetchErrorType] = None
    ) -> "FetchResult":
        meta = dict(metadata or {})
        if error_type is not None:
            meta["errorType"] = error_type.value
        return cls(success=False, data=None, error=error, metadata=meta)

    def with_metadata(self, **extra: Any) -> "FetchResult":
        """Copy of this result with extra metadata merged in"""
        return FetchResult(
            success=self.success,
            data=self.data,
            error=self.error,
            metadata={**self.metadata, **extra},
        )

    @property
    def error_type(self) -> Optional[str]:
        return self.metadata.get("errorType")


@dataclass(frozen=True)
class StreamResult:
    """Outcome of StreamLogsService.stream_logs"""
    success: bool
    data: Union[str, List[Dict[str, Any]], List[UnifiedLogRecord], None] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any, metadata: Optional[Dict[str, Any]] = None) -> "StreamResult":
        return cls(success=True, data=data, error=None, metadata=dict(metadata or {}))

    @classmethod
    def fail(cls, error: Optional[str], metadata: Optional[Dict[str, Any]] = None) -> "StreamResult":
        return cls(success=False, data=None, error=error, metadata=dict(metadata or {}))

    def to_dict(self) -> Dict[str, Any]:
        data = self.data
        if isinstance(data, list):
            data = [item.to_dict() if isinstance(item, UnifiedLogRecord) else item for item in data]
        return {
            "success": self.success,
            "data": data,
            "error": self.error,
            "metadata": self.metadata,
        }
