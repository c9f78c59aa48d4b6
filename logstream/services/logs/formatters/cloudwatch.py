"""
CloudWatch formatter.

Handles FilterLogEvents responses (``events``), ``logEvents`` batches as
PutLogEvents sends them, and EventBridge events, which carry a ``detail-type``.
"""

from typing import Any, Dict, List

from ..base import LogLevel, LogSourceType, UnifiedLogRecord, UnifiedLogRecordBuilder
from .base import Formatter, coerce_timestamp, infer_level, strip_ansi, timestamp_sort_key


def event_level(event: Dict[str, Any]) -> LogLevel:
    detail_type = str(event.get("detail-type") or "").lower()
    event_source = str(event.get("source") or "").lower()
    if "failed" in detail_type or "error" in detail_type or "error" in event_source:
        return LogLevel.ERROR
    if "warning" in detail_type or "alarm" in detail_type:
        return LogLevel.WARN
    return LogLevel.INFO


def is_eventbridge_event(entry: Dict[str, Any]) -> bool:
    return "detail-type" in entry


class CloudWatchFormatter(Formatter):
    """Normalizes CloudWatch log events and EventBridge events"""

    source_type = LogSourceType.CLOUDWATCH

    def _format_log_event(self, log_event: Dict[str, Any], index: int) -> UnifiedLogRecord:
        stream = log_event.get("logStreamName")
        message = strip_ansi(log_event.get("message"))
        if not message:
            message = f"CloudWatch log event from {stream or 'unknown stream'}"
        return (
            UnifiedLogRecordBuilder.create()
            .with_id(log_event.get("eventId"))
            .with_timestamp(coerce_timestamp(log_event.get("timestamp")))
            .with_source(self.source_type)
            .with_level(infer_level(text=message))
            .with_message(message)
            .with_meta({
                "logStreamName": stream,
                "eventId": log_event.get("eventId"),
                "ingestionTime": log_event.get("ingestionTime"),
            })
            .build()
        )

    def _format_event(self, event: Dict[str, Any], index: int) -> UnifiedLogRecord:
        detail_type = event.get("detail-type") or "Event"
        event_source = event.get("source") or "unknown source"
        return (
            UnifiedLogRecordBuilder.create()
            .with_id(event.get("id"))
            .with_timestamp(coerce_timestamp(event.get("time") or event.get("timestamp")))
            .with_source(self.source_type)
            .with_level(event_level(event))
            .with_message(f"{detail_type} from {event_source}")
            .with_meta({
                "source": event.get("source"),
                "detailType": event.get("detail-type"),
                "account": event.get("account"),
                "region": event.get("region"),
                "detail": event.get("detail"),
            })
            .build()
        )

    def _format_entry(self, entry: Dict[str, Any], index: int) -> UnifiedLogRecord:
        if is_eventbridge_event(entry):
            return self._format_event(entry, index)
        return self._format_log_event(entry, index)

    def format(self, raw: Any) -> List[UnifiedLogRecord]:
        if not isinstance(raw, dict):
            return self.shape_mismatch(raw)

        entries = raw.get("events")
        if not isinstance(entries, list):
            entries = raw.get("logEvents")
        if not isinstance(entries, list):
            return self.shape_mismatch(raw)

        # Newest first; the API returns events in ascending order
        entries = sorted(
            (entry for entry in entries if isinstance(entry, dict)),
            key=lambda entry: timestamp_sort_key(entry.get("timestamp") or entry.get("time")),
            reverse=True
        )
        return self.format_entries(entries, self._format_entry)
