"""
Vercel runtime log fetcher.
"""

from typing import Any, Dict, Optional

from ..base import FetchResult, LogSourceType
from .base import Fetcher
from .http import NDJSON, perform_http_request
from .validation import SourceLike, clamp_limit, get_config_value, resolve_config


VERCEL_API_URL = "https://api.vercel.com"


class VercelFetcher(Fetcher):
    """Reads runtime logs of a Vercel deployment"""

    source_type = LogSourceType.VERCEL
    display_name = "Vercel"
    required_fields = ("bearerToken", "projectId", "deploymentId")
    default_limit = 100
    max_limit = 1000

    async def fetch_data(
        self,
        source: SourceLike,
        line: Optional[int] = None,
        additional_params: Optional[Dict[str, Any]] = None
    ) -> FetchResult:
        if not self.validate_config(source):
            return self.invalid_config_result(source)

        config = resolve_config(source)
        project_id = get_config_value(config, "projectId")
        deployment_id = get_config_value(config, "deploymentId")
        limit = clamp_limit(line, self.default_limit, self.max_limit)

        params = {"teamId": config["teamId"]} if config.get("teamId") else None
        result = await perform_http_request(
            "GET",
            f"{VERCEL_API_URL}/v1/projects/{project_id}/deployments/{deployment_id}/runtime-logs",
            headers={"Authorization": f"Bearer {get_config_value(config, 'bearerToken')}"},
            params=params,
            response_format=NDJSON,
            **self.request_kwargs()
        )

        if not result.success:
            return result.with_metadata(
                projectId=project_id,
                deploymentId=deployment_id,
                source=self.source_type.value,
            )

        rows = result.data if isinstance(result.data, list) else []
        # The stream is chronological; keep the most recent rows, newest first
        rows = list(reversed(rows[-limit:]))
        return FetchResult.ok(
            rows,
            {
                **result.metadata,
                "projectId": project_id,
                "deploymentId": deployment_id,
                "requestedLimit": limit,
                "returnedCount": len(rows),
                "source": self.source_type.value,
            }
        )
