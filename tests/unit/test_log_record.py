"""
Unit tests for the unified log record and result envelopes
"""

import re
import pytest

from logstream.core.exceptions import RecordValidationError
from logstream.services.logs.base import (
    FetchErrorType,
    FetchResult,
    LogLevel,
    LogSourceType,
    SourceDescriptor,
    StreamResult,
    UnifiedLogRecord,
    UnifiedLogRecordBuilder,
    utc_now_iso,
)


ISO_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


class TestUnifiedLogRecordBuilder:
    """Test cases for UnifiedLogRecordBuilder"""

    def test_build_complete_record(self):
        record = (
            UnifiedLogRecordBuilder.create()
            .with_id("evt_1")
            .with_timestamp("2024-05-01T10:00:00.000Z")
            .with_source("stripe")
            .with_level("error")
            .with_message("Payment failed")
            .with_meta({"amount": 100})
            .build()
        )

        assert record.id == "evt_1"
        assert record.timestamp == "2024-05-01T10:00:00.000Z"
        assert record.source == LogSourceType.STRIPE
        assert record.level == LogLevel.ERROR
        assert record.message == "Payment failed"
        assert record.meta == {"amount": 100}

    def test_missing_id_and_timestamp_are_synthesized(self):
        record = (
            UnifiedLogRecordBuilder.create()
            .with_source(LogSourceType.GCP)
            .with_level(LogLevel.INFO)
            .with_message("hello")
            .build()
        )

        assert record.id
        assert ISO_PATTERN.match(record.timestamp)

    def test_synthesized_ids_are_unique(self):
        ids = {
            UnifiedLogRecordBuilder.create()
            .with_id(None)
            .with_source("gcp")
            .with_level("info")
            .with_message("x")
            .build()
            .id
            for _ in range(20)
        }
        assert len(ids) == 20

    @pytest.mark.parametrize("missing", ["source", "level", "message"])
    def test_missing_mandatory_field_fails(self, missing):
        builder = UnifiedLogRecordBuilder.create()
        if missing != "source":
            builder.with_source("sentry")
        if missing != "level":
            builder.with_level("warn")
        if missing != "message":
            builder.with_message("something")

        with pytest.raises(RecordValidationError) as exc_info:
            builder.build()

        assert missing in exc_info.value.message
        assert exc_info.value.details["missing_fields"] == [missing]

    def test_empty_message_is_rejected(self):
        with pytest.raises(RecordValidationError):
            UnifiedLogRecordBuilder.create().with_source("vercel").with_level("info").with_message("").build()

    def test_unknown_source_is_rejected(self):
        with pytest.raises(ValueError):
            UnifiedLogRecordBuilder.create().with_source("splunk")

    def test_meta_drops_none_values(self):
        record = (
            UnifiedLogRecordBuilder.create()
            .with_source("vercel")
            .with_level("info")
            .with_message("ok")
            .with_meta({"domain": "example.com", "requestPath": None})
            .build()
        )
        assert record.meta == {"domain": "example.com"}


class TestUnifiedLogRecord:
    """Test cases for UnifiedLogRecord"""

    @pytest.fixture
    def record(self):
        return UnifiedLogRecord(
            id="1",
            timestamp="2024-01-01T00:00:00.000Z",
            source=LogSourceType.CLOUDWATCH,
            level=LogLevel.WARN,
            message="disk almost full",
            meta={"logStreamName": "s1"},
        )

    def test_to_dict_uses_plain_values(self, record):
        assert record.to_dict() == {
            "id": "1",
            "timestamp": "2024-01-01T00:00:00.000Z",
            "source": "cloudwatch",
            "level": "warn",
            "message": "disk almost full",
            "meta": {"logStreamName": "s1"},
        }

    def test_str_renders_text_line(self, record):
        assert str(record) == "[2024-01-01T00:00:00.000Z] WARN  [cloudwatch] disk almost full"

    def test_records_are_immutable(self, record):
        with pytest.raises(Exception):
            record.message = "changed"


class TestResults:
    """Test cases for FetchResult, StreamResult and SourceDescriptor"""

    def test_fetch_result_ok(self):
        result = FetchResult.ok([1, 2], {"status": 200})
        assert result.success
        assert result.data == [1, 2]
        assert result.error is None
        assert result.error_type is None

    def test_fetch_result_fail_carries_error_type(self):
        result = FetchResult.fail("boom", {"url": "https://x"}, FetchErrorType.NETWORK_ERROR)
        assert not result.success
        assert result.data is None
        assert result.error == "boom"
        assert result.error_type == "network_error"
        assert result.metadata["url"] == "https://x"

    def test_with_metadata_merges(self):
        result = FetchResult.ok("data", {"status": 200}).with_metadata(source="coolify")
        assert result.metadata == {"status": 200, "source": "coolify"}
        assert result.data == "data"

    def test_stream_result_to_dict_serializes_records(self):
        record = (
            UnifiedLogRecordBuilder.create()
            .with_id("a")
            .with_timestamp("2024-01-01T00:00:00.000Z")
            .with_source("coolify")
            .with_level("info")
            .with_message("m")
            .build()
        )
        payload = StreamResult.ok([record], {"outputFormat": "unified"}).to_dict()
        assert payload["success"] is True
        assert payload["data"][0]["id"] == "a"
        assert payload["data"][0]["source"] == "coolify"

    def test_source_descriptor_from_dict(self):
        descriptor = SourceDescriptor.from_dict({"id": "s1", "slug": "stripe", "config": {"secretKey": "sk_x"}})
        assert descriptor.id == "s1"
        assert descriptor.slug == "stripe"
        assert descriptor.name == ""
        assert descriptor.config == {"secretKey": "sk_x"}

    def test_utc_now_iso_format(self):
        assert ISO_PATTERN.match(utc_now_iso())
