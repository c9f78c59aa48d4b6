"""
Coolify container log fetcher.
"""

from typing import Any, Dict, List, Optional

from logstream.core.exceptions import ConfigValidationError
from ..base import FetchResult, LogSourceType
from .base import Fetcher
from .http import perform_http_request
from .validation import SourceLike, clamp_limit, get_config_value, is_http_url, resolve_config


class CoolifyFetcher(Fetcher):
    """Reads application logs from a Coolify server"""

    source_type = LogSourceType.COOLIFY
    display_name = "Coolify"
    required_fields = ("server", "appId", "accessKey")
    default_limit = 20
    max_limit = 1000

    def check_config(self, config: Dict[str, Any]) -> List[ConfigValidationError]:
        if not is_http_url(config.get("server")):
            return [ConfigValidationError(self.display_name, "server", "not a valid http(s) URL")]
        return []

    async def fetch_data(
        self,
        source: SourceLike,
        line: Optional[int] = None,
        additional_params: Optional[Dict[str, Any]] = None
    ) -> FetchResult:
        if not self.validate_config(source):
            return self.invalid_config_result(source)

        config = resolve_config(source)
        app_id = get_config_value(config, "appId")
        access_key = get_config_value(config, "accessKey")
        server = get_config_value(config, "server").rstrip("/")
        lines = clamp_limit(line, self.default_limit, self.max_limit)

        result = await perform_http_request(
            "GET",
            f"{server}/api/v1/applications/{app_id}/logs",
            headers={
                "Authorization": f"Bearer {access_key}",
                "Accept": "application/json",
            },
            params={"lines": lines},
            **self.request_kwargs()
        )

        if not result.success:
            return result.with_metadata(appId=app_id, source=self.source_type.value)

        # The API wraps the log text in {"logs": "..."}
        data = result.data
        if isinstance(data, dict) and "logs" in data:
            data = data["logs"]

        return FetchResult.ok(
            data,
            {
                **result.metadata,
                "appId": app_id,
                "requestedLines": lines,
                "source": self.source_type.value,
            }
        )
