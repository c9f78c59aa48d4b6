"""
Coolify application log formatter.
"""

import hashlib
import re
from typing import Any, List, Optional

from ..base import LogSourceType, UnifiedLogRecord, UnifiedLogRecordBuilder
from .base import Formatter, infer_level, strip_ansi


LINE_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?Z?)\s+(.+)$")


class CoolifyFormatter(Formatter):
    """
    Splits raw container output into one record per line.

    Lines that start with an ISO timestamp get a content-derived id so the
    same line yields the same record across polls; other lines get a random id.
    """

    source_type = LogSourceType.COOLIFY

    def _lines(self, raw: Any) -> Optional[List[str]]:
        if isinstance(raw, dict):
            raw = raw.get("logs")
        if isinstance(raw, str):
            return [line for line in raw.split("\n") if line.strip()]
        if isinstance(raw, list) and all(isinstance(line, str) for line in raw):
            return [line for line in raw if line.strip()]
        return None

    def _format_line(self, line: str, index: int) -> UnifiedLogRecord:
        match = LINE_PATTERN.match(line.strip())
        if match:
            timestamp, message = match.group(1), match.group(2)
            record_id = hashlib.sha1(line.encode("utf-8")).hexdigest()
        else:
            timestamp, message, record_id = None, line, None

        message = strip_ansi(message)
        return (
            UnifiedLogRecordBuilder.create()
            .with_id(record_id)
            .with_timestamp(timestamp)
            .with_source(self.source_type)
            .with_level(infer_level(text=message))
            .with_message(message)
            .with_meta({
                "originalLine": line,
                "lineNumber": index + 1,
                "source": self.source_type.value,
            })
            .build()
        )

    def format(self, raw: Any) -> List[UnifiedLogRecord]:
        lines = self._lines(raw)
        if lines is None:
            return self.shape_mismatch(raw)
        # Container output is oldest first
        return list(reversed(self.format_entries(lines, self._format_line)))
