"""
Sentry issue formatter.
"""

from typing import Any, Dict, List

from ..base import LogLevel, LogSourceType, UnifiedLogRecord, UnifiedLogRecordBuilder
from .base import Formatter, normalize_level, strip_ansi


class SentryFormatter(Formatter):
    """Turns Sentry issues into one record per issue"""

    source_type = LogSourceType.SENTRY

    def _format_issue(self, issue: Dict[str, Any], index: int) -> UnifiedLogRecord:
        project = issue.get("project")
        return (
            UnifiedLogRecordBuilder.create()
            .with_id(issue.get("id"))
            .with_timestamp(issue.get("lastSeen") or issue.get("firstSeen"))
            .with_source(self.source_type)
            .with_level(normalize_level(issue.get("level")) or LogLevel.INFO)
            .with_message(f"Issue: {strip_ansi(issue.get('title')) or 'Unknown issue'}")
            .with_meta({
                "shortId": issue.get("shortId"),
                "status": issue.get("status"),
                "count": issue.get("count"),
                "userCount": issue.get("userCount"),
                "permalink": issue.get("permalink"),
                "project": project.get("name") if isinstance(project, dict) else project,
                "culprit": issue.get("culprit"),
                "type": issue.get("type"),
                "metadata": issue.get("metadata"),
                "tags": issue.get("tags"),
            })
            .build()
        )

    def format(self, raw: Any) -> List[UnifiedLogRecord]:
        if isinstance(raw, dict) and "title" in raw:
            raw = [raw]
        if not isinstance(raw, list):
            return self.shape_mismatch(raw)
        return self.format_entries(raw, self._format_issue)
