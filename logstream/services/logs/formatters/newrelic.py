"""
New Relic formatter.

NRQL results come back in several envelopes depending on the API used
(NerdGraph, the legacy query API, the Logs API) and the rows themselves
range from log lines to transactions and error events. Level and message
are therefore resolved through a precedence chain over whatever fields a
row carries.
"""

import json
from typing import Any, Dict, List, Optional

from ..base import LogLevel, LogSourceType, UnifiedLogRecord, UnifiedLogRecordBuilder
from .base import (
    SLOW_RESPONSE_MS,
    Formatter,
    coerce_timestamp,
    infer_level,
    level_from_http_status,
    strip_ansi,
)


def _entity(entry: Dict[str, Any]) -> Dict[str, Any]:
    entity = entry.get("entity")
    return entity if isinstance(entity, dict) else {}


def extract_rows(raw: Any) -> Optional[List[Any]]:
    """Find the list of rows inside any supported envelope, or None."""
    if isinstance(raw, list):
        return raw
    if not isinstance(raw, dict):
        return None

    data = raw.get("data")
    if isinstance(data, dict):
        try:
            results = data["actor"]["account"]["nrql"]["results"]
        except (KeyError, TypeError):
            results = None
        if isinstance(results, list):
            return results
    if isinstance(data, list):
        return data

    results = raw.get("results")
    if isinstance(results, list):
        if results and isinstance(results[0], dict) and isinstance(results[0].get("events"), list):
            return results[0]["events"]
        return results

    if raw.get("timestamp") and (raw.get("message") or raw.get("attributes")):
        return [raw]
    return None


def entry_level(entry: Dict[str, Any]) -> LogLevel:
    explicit = entry.get("level") or entry.get("logLevel") or entry.get("severity") or entry.get("priority")

    event_type = str(entry.get("eventType") or "").lower()
    if "error" in event_type or "exception" in event_type:
        event_signal = LogLevel.ERROR
    elif "warning" in event_type or "alert" in event_type:
        event_signal = LogLevel.WARN
    else:
        event_signal = None

    error_signal = LogLevel.ERROR if (
        entry.get("errorClass") or entry.get("errorMessage") or entry.get("stack")
    ) else None

    slow_signal = None
    response_time = entry.get("responseTime")
    if isinstance(response_time, (int, float)) and response_time > SLOW_RESPONSE_MS:
        slow_signal = LogLevel.WARN

    return infer_level(
        explicit=explicit,
        signals=(event_signal, error_signal, level_from_http_status(entry.get("httpStatusCode")), slow_signal),
        text=entry.get("message")
    )


def entry_message(entry: Dict[str, Any]) -> str:
    if entry.get("message"):
        return strip_ansi(entry["message"])

    if entry.get("errorMessage"):
        prefix = f"{entry['errorClass']}: " if entry.get("errorClass") else ""
        return strip_ansi(f"{prefix}{entry['errorMessage']}")

    if entry.get("transactionName"):
        status = f" [{entry['httpStatusCode']}]" if entry.get("httpStatusCode") else ""
        duration = f" ({entry['duration']}ms)" if entry.get("duration") else ""
        return f"Transaction: {entry['transactionName']}{status}{duration}"

    entity = _entity(entry)
    entity_name = entry.get("entityName") or entity.get("name")
    if entry.get("eventType"):
        on_entity = f" on {entity_name}" if entity_name else ""
        return f"Event: {entry['eventType']}{on_entity}"

    if entity_name:
        entity_type = entry.get("entityType") or entity.get("type")
        return f"Entity: {entity_name}" + (f" ({entity_type})" if entity_type else "")

    if entry.get("appName"):
        return f"Application: {entry['appName']}"
    if entry.get("hostname"):
        return f"Host: {entry['hostname']}"

    attributes = entry.get("attributes")
    if isinstance(attributes, dict):
        for key in ("message", "title", "summary"):
            if attributes.get(key):
                return strip_ansi(attributes[key])

    parts = []
    if entry.get("level"):
        parts.append(f"Level: {entry['level']}")
    if entry.get("accountId"):
        parts.append(f"Account: {entry['accountId']}")
    if entry.get("traceId"):
        parts.append(f"Trace: {str(entry['traceId'])[:8]}...")
    if parts:
        return " | ".join(parts)

    key_fields = {
        name: entry[name]
        for name in ("eventType", "entityType", "level")
        if entry.get(name) is not None
    }
    if key_fields:
        return f"New Relic Event: {json.dumps(key_fields)}"

    return "New Relic log entry"


class NewRelicFormatter(Formatter):
    """Normalizes NRQL result rows"""

    source_type = LogSourceType.NEWRELIC

    def _format_entry(self, entry: Dict[str, Any], index: int) -> UnifiedLogRecord:
        timestamp = None
        for name in ("timestamp", "createdAt", "occurredAt", "updatedAt"):
            timestamp = coerce_timestamp(entry.get(name))
            if timestamp:
                break

        entity = _entity(entry)
        return (
            UnifiedLogRecordBuilder.create()
            .with_id(entry.get("messageId") or entry.get("guid") or entry.get("id"))
            .with_timestamp(timestamp)
            .with_source(self.source_type)
            .with_level(entry_level(entry))
            .with_message(entry_message(entry) or "New Relic log entry")
            .with_meta({
                "entityId": entry.get("entityId") or entity.get("id"),
                "entityName": entry.get("entityName") or entity.get("name"),
                "entityType": entry.get("entityType") or entity.get("type"),
                "accountId": entry.get("accountId"),
                "hostname": entry.get("hostname"),
                "appName": entry.get("appName"),
                "transactionName": entry.get("transactionName"),
                "traceId": entry.get("traceId"),
                "spanId": entry.get("spanId"),
                "logLevel": entry.get("level") or entry.get("logLevel"),
                "severity": entry.get("severity"),
                "eventType": entry.get("eventType"),
                "errorClass": entry.get("errorClass"),
                "errorMessage": entry.get("errorMessage"),
                "stack": entry.get("stack"),
                "duration": entry.get("duration"),
                "responseTime": entry.get("responseTime"),
                "httpStatusCode": entry.get("httpStatusCode"),
                "attributes": entry.get("attributes"),
                "tags": entry.get("tags"),
            })
            .build()
        )

    def format(self, raw: Any) -> List[UnifiedLogRecord]:
        rows = extract_rows(raw)
        if rows is None:
            return self.shape_mismatch(raw)
        return self.format_entries(rows, self._format_entry)
