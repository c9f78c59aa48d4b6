"""
AWS CloudWatch Logs fetcher.

Talks to the CloudWatch Logs and CloudWatch JSON APIs over httpx, signing each
request with botocore's SigV4 signer and the credentials from the source config.
"""

import json
import re
import time
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

from logstream.core.config import settings
from logstream.core.exceptions import ConfigValidationError
from logstream.core.logging import logger
from ..base import FetchResult, LogSourceType
from .base import Fetcher
from .http import perform_http_request
from .validation import SourceLike, clamp_limit, get_config_value, resolve_config


REGION_PATTERN = re.compile(r"^[a-z]{2}(-[a-z]+)+-\d+$")

LOGS_TARGET_PREFIX = "Logs_20140328"
METRICS_TARGET_PREFIX = "GraniteServiceVersion20100801"


def sign_headers(
    url: str,
    headers: Dict[str, str],
    body: bytes,
    config: Dict[str, Any],
    service: str
) -> Dict[str, str]:
    """Return ``headers`` plus the SigV4 ``Authorization`` and ``X-Amz-*`` headers for a POST."""
    credentials = Credentials(
        get_config_value(config, "accessKeyId"),
        get_config_value(config, "secretAccessKey"),
        config.get("sessionToken") or None
    )
    request = AWSRequest(method="POST", url=url, data=body, headers=headers)
    SigV4Auth(credentials, service, get_config_value(config, "region")).add_auth(request)
    return dict(request.headers.items())


class CloudWatchFetcher(Fetcher):
    """
    Reads log events from a CloudWatch log group.

    FilterLogEvents returns events oldest first from ``startTime`` on, so the
    fetcher pages through ``nextToken`` to the end of the window and keeps
    the newest ``line`` events.
    """

    source_type = LogSourceType.CLOUDWATCH
    display_name = "CloudWatch"
    required_fields = ("accessKeyId", "secretAccessKey", "region", "logGroupName")
    default_limit = 20
    max_limit = 10000

    def check_config(self, config: Dict[str, Any]) -> List[ConfigValidationError]:
        if not REGION_PATTERN.match(str(config.get("region", "")).strip()):
            return [ConfigValidationError(self.display_name, "region", "not a valid AWS region name")]
        return []

    async def _call(
        self,
        config: Dict[str, Any],
        service: str,
        host_prefix: str,
        target: str,
        content_type: str,
        payload: Dict[str, Any]
    ) -> FetchResult:
        region = get_config_value(config, "region")
        url = f"https://{host_prefix}.{region}.amazonaws.com/"
        body = json.dumps(payload).encode("utf-8")
        headers = sign_headers(url, {"Content-Type": content_type, "X-Amz-Target": target}, body, config, service)

        return await perform_http_request(
            "POST",
            url,
            headers=headers,
            content=body,
            **self.request_kwargs()
        )

    def _masked_key(self, config: Dict[str, Any]) -> str:
        return str(get_config_value(config, "accessKeyId", ""))[:8] + "..."

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
        log_group_name = get_config_value(config, "logGroupName")
        request_metadata = {
            "accessKeyId": self._masked_key(config),
            "region": config.get("region"),
            "logGroupName": log_group_name,
            "requestedLimit": limit,
            "source": self.source_type.value,
        }

        now_ms = int(time.time() * 1000)
        payload: Dict[str, Any] = {
            "logGroupName": log_group_name,
            "limit": self.max_limit,
            "startTime": int(additional_params.get(
                "startTime", now_ms - settings.cloudwatch_lookback_minutes * 60 * 1000
            )),
        }
        if additional_params.get("endTime"):
            payload["endTime"] = int(additional_params["endTime"])
        if additional_params.get("filterPattern"):
            payload["filterPattern"] = additional_params["filterPattern"]
        if additional_params.get("logStreamNames"):
            payload["logStreamNames"] = list(additional_params["logStreamNames"])

        events: Deque[Dict[str, Any]] = deque(maxlen=limit)
        searched_streams: List[Any] = []
        next_token: Optional[str] = None
        pages = 0
        truncated = False

        while True:
            if next_token:
                payload["nextToken"] = next_token
            result = await self._call(
                config,
                service="logs",
                host_prefix="logs",
                target=f"{LOGS_TARGET_PREFIX}.FilterLogEvents",
                content_type="application/x-amz-json-1.1",
                payload=payload,
            )
            if not result.success:
                return result.with_metadata(**request_metadata, pages=pages)
            if not isinstance(result.data, dict):
                return result.with_metadata(**request_metadata, pages=pages + 1)

            pages += 1
            events.extend(event for event in result.data.get("events") or [] if isinstance(event, dict))
            searched_streams.extend(result.data.get("searchedLogStreams") or [])

            token = result.data.get("nextToken")
            if not token or token == next_token:
                break
            if pages >= settings.cloudwatch_max_pages:
                logger.warning(
                    f"CloudWatch {log_group_name}: stopped after {pages} pages, newest events may be missing"
                )
                truncated = True
                break
            next_token = token

        return FetchResult.ok(
            {"events": list(events), "searchedLogStreams": searched_streams},
            result.metadata
        ).with_metadata(**request_metadata, pages=pages, truncated=truncated)

    async def fetch_metrics(self, source: SourceLike, metric_name: str, namespace: str) -> FetchResult:
        """Fetch the last hour of a metric at 5 minute resolution."""
        if not self.validate_config(source):
            return self.invalid_config_result(source)

        config = resolve_config(source)
        end_time = int(time.time())
        payload = {
            "MetricDataQueries": [
                {
                    "Id": "metric1",
                    "MetricStat": {
                        "Metric": {"MetricName": metric_name, "Namespace": namespace},
                        "Period": 300,
                        "Stat": "Average",
                    },
                }
            ],
            "StartTime": end_time - 3600,
            "EndTime": end_time,
        }

        result = await self._call(
            config,
            service="monitoring",
            host_prefix="monitoring",
            target=f"{METRICS_TARGET_PREFIX}.GetMetricData",
            content_type="application/x-amz-json-1.0",
            payload=payload,
        )

        return result.with_metadata(
            metricName=metric_name,
            namespace=namespace,
            source=self.source_type.value,
        )
