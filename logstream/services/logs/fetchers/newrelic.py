"""
New Relic fetcher using NRQL over the NerdGraph GraphQL API.
"""

from typing import Any, Dict, List, Optional

from logstream.core.exceptions import ConfigValidationError
from logstream.core.logging import logger
from ..base import FetchErrorType, FetchResult, LogSourceType
from .base import Fetcher
from .http import perform_http_request
from .validation import SourceLike, clamp_limit, get_config_value, resolve_config


NERDGRAPH_URL = "https://api.newrelic.com/graphql"

NRQL_QUERY = """
query($accountId: Int!, $nrql: Nrql!) {
  actor {
    account(id: $accountId) {
      nrql(query: $nrql) {
        results
      }
    }
  }
}
"""


class NewRelicFetcher(Fetcher):
    """Runs NRQL queries against a New Relic account"""

    source_type = LogSourceType.NEWRELIC
    display_name = "New Relic"
    required_fields = ("accountNumber", "apiKey")
    default_limit = 5
    max_limit = 5000

    def check_config(self, config: Dict[str, Any]) -> List[ConfigValidationError]:
        if not str(config.get("accountNumber")).strip().isdigit():
            return [ConfigValidationError(self.display_name, "accountNumber", "must be numeric")]
        return []

    async def _run_nrql(self, config: Dict[str, Any], nrql: str) -> FetchResult:
        result = await perform_http_request(
            "POST",
            NERDGRAPH_URL,
            headers={
                "API-Key": get_config_value(config, "apiKey"),
                "Content-Type": "application/json",
            },
            json_body={
                "query": NRQL_QUERY,
                "variables": {
                    "accountId": int(str(config["accountNumber"]).strip()),
                    "nrql": nrql,
                },
            },
            **self.request_kwargs()
        )

        # GraphQL reports failures in the body with a 200 status
        if result.success and isinstance(result.data, dict) and result.data.get("errors"):
            messages = [
                error.get("message", "unknown error") if isinstance(error, dict) else str(error)
                for error in result.data["errors"]
            ]
            logger.warning(f"New Relic GraphQL errors: {messages}")
            return FetchResult.fail(
                f"GraphQL error: {'; '.join(messages)}",
                {**result.metadata, "graphqlErrors": messages},
                FetchErrorType.UPSTREAM_ERROR
            )
        return result

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
        time_range = additional_params.get("timeRange") or "30 minutes ago"
        nrql = additional_params.get("query") or f"SELECT * FROM Log SINCE {time_range} LIMIT {limit}"

        result = await self._run_nrql(config, nrql)
        return result.with_metadata(
            accountNumber=config.get("accountNumber"),
            requestedLimit=limit,
            timeRange=time_range,
            query=nrql,
            source=self.source_type.value,
        )

    async def fetch_custom_query(self, source: SourceLike, nrql: str) -> FetchResult:
        """Run an arbitrary NRQL query."""
        if not self.validate_config(source):
            return self.invalid_config_result(source)

        config = resolve_config(source)
        result = await self._run_nrql(config, nrql)
        return result.with_metadata(
            accountNumber=config.get("accountNumber"),
            query=nrql,
            source=self.source_type.value,
        )
