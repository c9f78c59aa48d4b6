import logging
import re
import sys

from logstream.core.config import settings


class CredentialRedactionFilter(logging.Filter):
    """Mask provider credentials that end up in log messages."""

    REDACTION_PATTERNS = [
        (re.compile(r"(Bearer\s+)[A-Za-z0-9._\-~+/=]+", re.IGNORECASE), r"\1***"),
        (re.compile(r"\b((?:sk|rk|pk)_(?:live|test)_)[A-Za-z0-9]+"), r"\1***"),
        (re.compile(r"(API-Key['\"]?\s*[:=]\s*['\"]?)[A-Za-z0-9\-_.]+", re.IGNORECASE), r"\1***"),
        (re.compile(r"(-----BEGIN [A-Z ]*PRIVATE KEY-----).*?(-----END [A-Z ]*PRIVATE KEY-----)", re.DOTALL), r"\1***\2"),
    ]

    def redact(self, text: str) -> str:
        for pattern, replacement in self.REDACTION_PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def filter(self, record):
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            # Freeze the redacted text so handlers never re-render the raw args
            record.msg = redacted
            record.args = None
        return True


def setup_logging():
    """Configure logging with credential redaction."""
    # Root logger configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)

    # Create console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(settings.log_level)

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(formatter)
    console_handler.addFilter(CredentialRedactionFilter())

    # Clear existing handlers and add our configured handler
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    # httpx logs every request at INFO, including query strings
    logging.getLogger("httpx").setLevel(logging.WARNING)

    # Apply redaction to uvicorn loggers as well
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        for handler in logging.getLogger(name).handlers:
            handler.addFilter(CredentialRedactionFilter())

    return root_logger
