"""
Vercel runtime log formatter.
"""

from typing import Any, Dict, List

from ..base import LogSourceType, UnifiedLogRecord, UnifiedLogRecordBuilder
from .base import Formatter, epoch_ms_to_iso, infer_level, level_from_http_status, strip_ansi


class VercelFormatter(Formatter):
    """Normalizes runtime log rows, prefixing request context to the message"""

    source_type = LogSourceType.VERCEL

    def _format_row(self, row: Dict[str, Any], index: int) -> UnifiedLogRecord:
        message = strip_ansi(row.get("message")) or "No message provided"
        method, path = row.get("requestMethod"), row.get("requestPath")
        status = row.get("responseStatusCode")
        if method and path:
            message = f"[{method} {path}] {message}"
        if status:
            message = f"[{status}] {message}"

        timestamp = row.get("timestampInMs")
        return (
            UnifiedLogRecordBuilder.create()
            .with_id(row.get("rowId"))
            .with_timestamp(epoch_ms_to_iso(timestamp) if timestamp is not None else None)
            .with_source(self.source_type)
            .with_level(infer_level(explicit=row.get("level"), signals=(level_from_http_status(status),)))
            .with_message(message)
            .with_meta({
                "rowId": row.get("rowId"),
                "source": row.get("source"),
                "domain": row.get("domain"),
                "messageTruncated": row.get("messageTruncated") or None,
                "requestMethod": method,
                "requestPath": path,
                "responseStatusCode": status,
            })
            .build()
        )

    def format(self, raw: Any) -> List[UnifiedLogRecord]:
        if isinstance(raw, dict) and "rowId" in raw:
            raw = [raw]
        if not isinstance(raw, list):
            return self.shape_mismatch(raw)
        return self.format_entries(raw, self._format_row)
