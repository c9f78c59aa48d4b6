"""
Fetcher interface for provider data retrieval.

Every fetcher validates its provider-specific configuration before touching
the network and reports failures as FetchResult values instead of raising,
so one misconfigured or unreachable provider never interrupts the others.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import httpx

from logstream.core.exceptions import ConfigValidationError
from logstream.core.logging import logger
from ..base import FetchErrorType, FetchResult, LogSourceType
from .validation import SourceLike, resolve_config, validate_required_fields


class Fetcher(ABC):
    """
    Abstract base class for provider fetchers.

    Subclasses declare their required config fields and limits, implement
    check_config() for shape rules and fetch_data() for the retrieval.
    """

    source_type: LogSourceType
    display_name: str = ""
    required_fields: Tuple[str, ...] = ()
    default_limit: int = 20
    max_limit: int = 100

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: Optional[float] = None):
        """
        Args:
            client: Optional shared HTTP client (a short-lived one is opened per call otherwise)
            timeout: Request timeout in seconds when no client is given
        """
        self.client = client
        self.timeout = timeout

    def get_source_type(self) -> LogSourceType:
        return self.source_type

    def check_config(self, config: Dict[str, Any]) -> List[ConfigValidationError]:
        """Provider-specific shape checks; only called once required fields are present."""
        return []

    def missing_fields(self, source: SourceLike) -> List[str]:
        """Required config fields that are absent or blank."""
        return validate_required_fields(resolve_config(source), self.required_fields)

    def config_errors(self, source: SourceLike) -> List[ConfigValidationError]:
        """Every problem with a source's configuration, one error per field."""
        missing = self.missing_fields(source)
        if missing:
            return [ConfigValidationError(self.display_name, field) for field in missing]
        return self.check_config(resolve_config(source))

    def validate_config(self, source: SourceLike) -> bool:
        """Whether the source's configuration is usable. Never raises."""
        try:
            errors = self.config_errors(source)
        except Exception as e:
            logger.warning(f"{self.display_name} config could not be validated: {e}")
            return False

        if errors:
            logger.warning(
                f"{self.display_name} config invalid: "
                + "; ".join(error.message for error in errors)
            )
            return False
        return True

    def invalid_config_result(self, source: SourceLike) -> FetchResult:
        try:
            errors = self.config_errors(source)
        except Exception as e:
            errors = []
            logger.debug(f"Config inspection failed for {self.display_name}: {e}")
        return FetchResult.fail(
            f"Invalid {self.display_name} configuration",
            {
                "source": self.source_type.value,
                "configErrors": [error.details for error in errors],
            },
            FetchErrorType.INVALID_CONFIG
        )

    def request_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments shared by every perform_http_request call."""
        return {"client": self.client, "timeout": self.timeout}

    @abstractmethod
    async def fetch_data(
        self,
        source: SourceLike,
        line: Optional[int] = None,
        additional_params: Optional[Dict[str, Any]] = None
    ) -> FetchResult:
        """
        Retrieve raw provider data for a source.

        Args:
            source: Descriptor of the configured provider instance
            line: Requested number of lines/entries, clamped to the provider maximum
            additional_params: Provider-specific query options

        Returns:
            FetchResult; failures carry ``metadata["errorType"]``
        """
        pass
