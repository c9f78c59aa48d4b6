"""
Google Cloud Logging entry formatter.
"""

import json
from typing import Any, Dict, List

from ..base import LogLevel, LogSourceType, UnifiedLogRecord, UnifiedLogRecordBuilder
from .base import Formatter, coerce_timestamp, strip_ansi


SEVERITY_LEVELS = {
    "EMERGENCY": LogLevel.ERROR,
    "ALERT": LogLevel.ERROR,
    "CRITICAL": LogLevel.ERROR,
    "ERROR": LogLevel.ERROR,
    "WARNING": LogLevel.WARN,
    "NOTICE": LogLevel.INFO,
    "INFO": LogLevel.INFO,
    "DEBUG": LogLevel.DEBUG,
    "DEFAULT": LogLevel.INFO,
}


def entry_message(entry: Dict[str, Any]) -> str:
    if entry.get("textPayload"):
        return str(entry["textPayload"])

    payload = entry.get("jsonPayload")
    if payload:
        if isinstance(payload, dict):
            if payload.get("message"):
                return str(payload["message"])
            if payload.get("msg"):
                return str(payload["msg"])
        return json.dumps(payload, sort_keys=True, default=str)

    proto = entry.get("protoPayload")
    if proto:
        if isinstance(proto, dict) and proto.get("methodName"):
            status = proto.get("status") or {}
            status_message = status.get("message", "") if isinstance(status, dict) else ""
            return f"{proto['methodName']} {status_message}".strip()
        return json.dumps(proto, sort_keys=True, default=str)

    return f"GCP Log Entry from {entry.get('logName') or 'unknown source'}"


class GcpFormatter(Formatter):
    """Normalizes Cloud Logging entries"""

    source_type = LogSourceType.GCP

    def _format_entry(self, entry: Dict[str, Any], index: int) -> UnifiedLogRecord:
        severity = str(entry.get("severity") or "DEFAULT").upper()
        return (
            UnifiedLogRecordBuilder.create()
            .with_id(entry.get("insertId"))
            .with_timestamp(coerce_timestamp(entry.get("timestamp") or entry.get("receiveTimestamp")))
            .with_source(self.source_type)
            .with_level(SEVERITY_LEVELS.get(severity, LogLevel.INFO))
            .with_message(strip_ansi(entry_message(entry)) or "GCP Log Entry")
            .with_meta({
                "logName": entry.get("logName"),
                "insertId": entry.get("insertId"),
                "resource": entry.get("resource"),
                "severity": entry.get("severity"),
                "labels": entry.get("labels"),
                "sourceLocation": entry.get("sourceLocation"),
                "httpRequest": entry.get("httpRequest"),
                "operation": entry.get("operation"),
                "trace": entry.get("trace"),
                "spanId": entry.get("spanId"),
            })
            .build()
        )

    def format(self, raw: Any) -> List[UnifiedLogRecord]:
        if isinstance(raw, dict) and isinstance(raw.get("entries"), list):
            return self.format_entries(raw["entries"], self._format_entry)
        if isinstance(raw, dict) and raw.get("logName"):
            return self.format_entries([raw], self._format_entry)
        # An empty page omits the entries key entirely
        if isinstance(raw, dict) and set(raw) <= {"nextPageToken"}:
            return []
        return self.shape_mismatch(raw)
