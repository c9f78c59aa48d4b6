"""
Formatter interface and shared normalization helpers.

Formatters turn a raw provider payload into UnifiedLogRecords. They never
raise for an unrecognized payload; they log the mismatch and return an
empty list so a single odd response cannot break a polling cycle.
"""

import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from logstream.core.exceptions import AppException, FormatterShapeMismatch
from logstream.core.logging import logger
from ..base import LogLevel, LogSourceType, UnifiedLogRecord


ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")

# Response time above which a request is reported as a warning
SLOW_RESPONSE_MS = 5000

LEVEL_ALIASES: Dict[str, LogLevel] = {
    "fatal": LogLevel.ERROR,
    "critical": LogLevel.ERROR,
    "emergency": LogLevel.ERROR,
    "alert": LogLevel.ERROR,
    "severe": LogLevel.ERROR,
    "error": LogLevel.ERROR,
    "err": LogLevel.ERROR,
    "warn": LogLevel.WARN,
    "warning": LogLevel.WARN,
    "caution": LogLevel.WARN,
    "debug": LogLevel.DEBUG,
    "trace": LogLevel.DEBUG,
    "verbose": LogLevel.DEBUG,
    "info": LogLevel.INFO,
    "notice": LogLevel.INFO,
    "information": LogLevel.INFO,
    "log": LogLevel.INFO,
}


def strip_ansi(message: Any) -> str:
    """Remove ANSI escape sequences and surrounding whitespace."""
    if message is None:
        return ""
    return ANSI_ESCAPE.sub("", str(message)).strip()


def normalize_level(value: Any) -> Optional[LogLevel]:
    """Map an explicit provider level/severity to a LogLevel, or None if unknown."""
    if value is None:
        return None
    return LEVEL_ALIASES.get(str(value).strip().lower())


def level_from_http_status(status: Any) -> Optional[LogLevel]:
    try:
        code = int(status)
    except (TypeError, ValueError):
        return None
    if code >= 500:
        return LogLevel.ERROR
    if code >= 400:
        return LogLevel.WARN
    return None


def level_from_text(text: Any) -> Optional[LogLevel]:
    if not text:
        return None
    lowered = str(text).lower()
    if "error" in lowered or "fail" in lowered:
        return LogLevel.ERROR
    if "warn" in lowered:
        return LogLevel.WARN
    return None


def infer_level(
    explicit: Any = None,
    signals: Iterable[Optional[LogLevel]] = (),
    text: Any = None
) -> LogLevel:
    """
    Resolve a level with the shared precedence.

    Args:
        explicit: Provider level/severity field, used if it maps to a known level
        signals: Provider-specific inferences (HTTP status, slow response, error fields), in order
        text: Message or title for the keyword heuristic

    Returns:
        The first level found, falling back to info
    """
    level = normalize_level(explicit)
    if level is not None:
        return level
    for signal in signals:
        if signal is not None:
            return signal
    return level_from_text(text) or LogLevel.INFO


def epoch_ms_to_iso(value: Union[int, float]) -> str:
    moment = datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_seconds_to_iso(value: Union[int, float]) -> str:
    return epoch_ms_to_iso(float(value) * 1000.0)


def coerce_timestamp(value: Any) -> Optional[str]:
    """
    Normalize an ISO string or epoch number into an ISO-8601 string.

    Numbers above 1e11 are taken as epoch milliseconds, smaller ones as
    epoch seconds. Returns None when nothing usable was supplied.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            if value > 1e11:
                return epoch_ms_to_iso(value)
            return epoch_seconds_to_iso(value)
        except (OverflowError, OSError, ValueError):
            return None
    text = str(value).strip()
    if text.isdigit():
        return coerce_timestamp(int(text))
    return text or None


def timestamp_sort_key(value: Any) -> float:
    """Epoch milliseconds for ordering records; 0 when the value cannot be read."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if value > 1e11 else float(value) * 1000.0
    text = str(value).strip()
    try:
        return timestamp_sort_key(float(text))
    except ValueError:
        pass
    try:
        moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp() * 1000.0


class Formatter(ABC):
    """Normalizes one provider's payloads into UnifiedLogRecords"""

    source_type: LogSourceType

    def get_source_type(self) -> LogSourceType:
        return self.source_type

    @abstractmethod
    def format(self, raw: Any) -> List[UnifiedLogRecord]:
        """
        Convert a raw payload into records, newest first.

        Returns an empty list for payloads this formatter does not recognize.
        """
        pass

    def shape_mismatch(self, raw: Any) -> List[UnifiedLogRecord]:
        mismatch = FormatterShapeMismatch(self.source_type.value, type(raw).__name__)
        logger.debug(f"Formatter shape mismatch: {mismatch.message}")
        return []

    def format_entries(self, entries: Iterable[Any], format_entry) -> List[UnifiedLogRecord]:
        """Apply format_entry to each entry, skipping malformed ones."""
        records = []
        for index, entry in enumerate(entries):
            try:
                record = format_entry(entry, index)
            except (AppException, KeyError, TypeError, ValueError, AttributeError) as e:
                logger.debug(f"Skipping malformed {self.source_type.value} entry at {index}: {e}")
                continue
            if record is not None:
                records.append(record)
        return records
