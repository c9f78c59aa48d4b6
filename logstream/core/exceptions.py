from typing import Optional, Dict, Any, Iterable
from fastapi import status


class AppException(Exception):
    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class UnsupportedSourceError(AppException):
    def __init__(self, source_type: str, available: Optional[Iterable[str]] = None):
        super().__init__(
            f"Unsupported source: {source_type}",
            "UNSUPPORTED_SOURCE",
            status.HTTP_400_BAD_REQUEST,
            {"source_type": source_type, "available_sources": sorted(available or [])}
        )


class ValidationError(AppException):
    def __init__(self, message: str = "Validation failed", code: str = "VALIDATION_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code, status.HTTP_400_BAD_REQUEST, details)


class ConfigValidationError(ValidationError):
    def __init__(self, source_type: str, field: str, message: Optional[str] = None):
        if message is None:
            super().__init__(
                f"{source_type} config missing required field: {field}",
                "MISSING_CONFIG_FIELD",
                {"source_type": source_type, "field": field}
            )
        else:
            super().__init__(
                f"{source_type} config field '{field}' is invalid: {message}",
                "INVALID_CONFIG_FIELD",
                {"source_type": source_type, "field": field}
            )
        self.source_type = source_type
        self.field = field


class RecordValidationError(ValidationError):
    def __init__(self, missing_fields: Iterable[str]):
        missing = list(missing_fields)
        super().__init__(
            f"Missing required fields: {', '.join(missing)}",
            "INVALID_LOG_RECORD",
            {"missing_fields": missing}
        )


class ResourceError(AppException):
    pass


class SourceNotFoundError(ResourceError):
    def __init__(self, source_id: str):
        super().__init__(
            f"Source with id {source_id} not found",
            "SOURCE_NOT_FOUND",
            status.HTTP_404_NOT_FOUND,
            {"source_id": source_id}
        )


class ExternalServiceError(AppException):
    pass


class NetworkError(ExternalServiceError):
    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(
            f"Network error: {message}",
            "NETWORK_ERROR",
            status.HTTP_503_SERVICE_UNAVAILABLE,
            {"url": url}
        )


class UpstreamError(ExternalServiceError):
    def __init__(self, status_code: int, reason: str, body: Any = None):
        super().__init__(
            f"HTTP {status_code}: {reason}",
            "UPSTREAM_ERROR",
            status.HTTP_502_BAD_GATEWAY,
            {"upstream_status": status_code}
        )
        self.upstream_status = status_code
        self.reason = reason
        self.body = body


class ParseError(ExternalServiceError):
    def __init__(self, message: str = "Failed to parse response as JSON", parse_error: Optional[str] = None):
        super().__init__(
            message,
            "PARSE_ERROR",
            status.HTTP_502_BAD_GATEWAY,
            {"parse_error": parse_error}
        )


class FormatterShapeMismatch(AppException):
    """
    Payload shape not recognized by a formatter.

    Formatters normalize this condition to an empty record sequence; the
    exception exists so callers that want strict handling can raise it.
    """

    def __init__(self, source_type: str, shape: str):
        super().__init__(
            f"Unrecognized {source_type} payload shape: {shape}",
            "FORMATTER_SHAPE_MISMATCH",
            status.HTTP_400_BAD_REQUEST,
            {"source_type": source_type, "shape": shape}
        )
