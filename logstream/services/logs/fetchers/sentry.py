"""
Sentry issue fetcher.
"""

from typing import Any, Dict, List, Optional

from logstream.core.exceptions import ConfigValidationError
from ..base import FetchResult, LogSourceType
from .base import Fetcher
from .http import perform_http_request
from .validation import SourceLike, clamp_limit, get_config_value, is_http_url, resolve_config


SENTRY_BASE_URL = "https://sentry.io"


class SentryFetcher(Fetcher):
    """Reads project issues from the Sentry web API"""

    source_type = LogSourceType.SENTRY
    display_name = "Sentry"
    required_fields = ("projectId", "orgId", "accessKey")
    default_limit = 20
    max_limit = 100

    def check_config(self, config: Dict[str, Any]) -> List[ConfigValidationError]:
        # Self-hosted installs override the SaaS host
        base_url = config.get("baseUrl")
        if base_url and not is_http_url(base_url):
            return [ConfigValidationError(self.display_name, "baseUrl", "not a valid http(s) URL")]
        return []

    def _project_url(self, config: Dict[str, Any]) -> str:
        base_url = (config.get("baseUrl") or SENTRY_BASE_URL).rstrip("/")
        org_id = get_config_value(config, "orgId")
        project_id = get_config_value(config, "projectId")
        return f"{base_url}/api/0/projects/{org_id}/{project_id}"

    def _headers(self, config: Dict[str, Any]) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {get_config_value(config, 'accessKey')}",
            "Accept": "application/json",
        }

    async def fetch_data(
        self,
        source: SourceLike,
        line: Optional[int] = None,
        additional_params: Optional[Dict[str, Any]] = None
    ) -> FetchResult:
        if not self.validate_config(source):
            return self.invalid_config_result(source)

        config = resolve_config(source)
        additional_params = additional_params or {}
        limit = clamp_limit(line, self.default_limit, self.max_limit)

        params: Dict[str, Any] = {"limit": limit}
        for key in ("statsPeriod", "query"):
            if additional_params.get(key):
                params[key] = additional_params[key]

        result = await perform_http_request(
            "GET",
            f"{self._project_url(config)}/issues/",
            headers=self._headers(config),
            params=params,
            **self.request_kwargs()
        )

        return result.with_metadata(
            projectId=config.get("projectId"),
            organizationId=config.get("orgId"),
            requestedLimit=limit,
            source=self.source_type.value,
        )

    async def fetch_issue_details(self, source: SourceLike, issue_id: str) -> FetchResult:
        """Fetch a single issue of the configured project."""
        if not self.validate_config(source):
            return self.invalid_config_result(source)

        config = resolve_config(source)
        result = await perform_http_request(
            "GET",
            f"{self._project_url(config)}/issues/{issue_id}/",
            headers=self._headers(config),
            **self.request_kwargs()
        )

        return result.with_metadata(
            projectId=config.get("projectId"),
            organizationId=config.get("orgId"),
            issueId=issue_id,
            source=self.source_type.value,
        )
