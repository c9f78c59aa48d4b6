"""
Google Cloud Logging fetcher.

Authenticates with the service-account JWT bearer flow: a short-lived RS256
assertion signed with the account's private key is exchanged for an OAuth2
access token, which is then used against the Cloud Logging v2 API.
"""

import time
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from jose import jwt
from jose.exceptions import JOSEError

from logstream.core.config import settings
from logstream.core.exceptions import ConfigValidationError
from logstream.core.logging import logger
from ..base import FetchErrorType, FetchResult, LogSourceType, utc_now_iso
from .base import Fetcher
from .http import perform_http_request
from .validation import SourceLike, clamp_limit, get_config_value, parse_json_object, resolve_config


LOGGING_API_URL = "https://logging.googleapis.com/v2/entries:list"
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"
LOGGING_READ_SCOPE = "https://www.googleapis.com/auth/logging.read"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"


class GcpFetcher(Fetcher):
    """Reads log entries of a GCP project from Cloud Logging"""

    source_type = LogSourceType.GCP
    display_name = "GCP"
    required_fields = ("projectId", "serviceAccountKey")
    default_limit = 20
    max_limit = 1000

    def check_config(self, config: Dict[str, Any]) -> List[ConfigValidationError]:
        key = parse_json_object(config.get("serviceAccountKey"))
        if key is None:
            return [ConfigValidationError(self.display_name, "serviceAccountKey", "not valid JSON")]
        if self._mock_enabled(config):
            return []
        missing = [name for name in ("client_email", "private_key") if not key.get(name)]
        return [
            ConfigValidationError(self.display_name, "serviceAccountKey", f"missing {name}")
            for name in missing
        ]

    def _mock_enabled(self, config: Dict[str, Any]) -> bool:
        return settings.gcp_mock_entries or bool(config.get("mock"))

    def _mock_entries(self, project_id: str, log_filter: Optional[str]) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "logName": f"projects/{project_id}/logs/application",
            "timestamp": utc_now_iso(),
            "resource": {
                "type": "gce_instance",
                "labels": {"instance_id": "12345", "zone": "us-central1-a"},
            },
            "insertId": f"mock-{int(time.time() * 1000)}",
        }
        if log_filter:
            entry["severity"] = "ERROR"
            entry["jsonPayload"] = {"message": "Filtered log entry based on criteria", "filter": log_filter}
        else:
            entry["severity"] = "INFO"
            entry["textPayload"] = "GCP log entry - this would be actual log data"
        return {"entries": [entry], "nextPageToken": None}

    async def _access_token(self, key: Dict[str, Any]) -> FetchResult:
        token_uri = key.get("token_uri") or DEFAULT_TOKEN_URI
        issued_at = int(time.time())
        claims = {
            "iss": key["client_email"],
            "scope": LOGGING_READ_SCOPE,
            "aud": token_uri,
            "iat": issued_at,
            "exp": issued_at + 3600,
        }
        headers = {"kid": key["private_key_id"]} if key.get("private_key_id") else None

        try:
            assertion = jwt.encode(claims, key["private_key"], algorithm="RS256", headers=headers)
        except JOSEError as e:
            logger.warning(f"Could not sign GCP token assertion: {e}")
            return FetchResult.fail(
                "Invalid GCP service account key",
                {"source": self.source_type.value, "signingError": str(e)},
                FetchErrorType.INVALID_CONFIG
            )

        result = await perform_http_request(
            "POST",
            token_uri,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            content=urlencode({"grant_type": JWT_BEARER_GRANT, "assertion": assertion}).encode("utf-8"),
            **self.request_kwargs()
        )
        if result.success and not (isinstance(result.data, dict) and result.data.get("access_token")):
            return FetchResult.fail(
                "GCP token response did not contain an access token",
                result.metadata,
                FetchErrorType.PARSE_ERROR
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
        project_id = get_config_value(config, "projectId")
        limit = clamp_limit(line, self.default_limit, self.max_limit)
        log_filter = additional_params.get("filter")

        if self._mock_enabled(config):
            data = self._mock_entries(project_id, log_filter)
            return FetchResult.ok(
                data,
                {
                    "projectId": project_id,
                    "requestedLimit": limit,
                    "entriesCount": len(data["entries"]),
                    "source": self.source_type.value,
                    "mock": True,
                }
            )

        key = parse_json_object(config["serviceAccountKey"])
        token_result = await self._access_token(key)
        if not token_result.success:
            return token_result.with_metadata(projectId=project_id, source=self.source_type.value)

        body: Dict[str, Any] = {
            "resourceNames": [f"projects/{project_id}"],
            "pageSize": limit,
            "orderBy": "timestamp desc",
        }
        if log_filter:
            body["filter"] = log_filter

        result = await perform_http_request(
            "POST",
            LOGGING_API_URL,
            headers={"Authorization": f"Bearer {token_result.data['access_token']}"},
            json_body=body,
            **self.request_kwargs()
        )

        entries = result.data.get("entries", []) if result.success and isinstance(result.data, dict) else []
        return result.with_metadata(
            projectId=project_id,
            requestedLimit=limit,
            entriesCount=len(entries),
            filter=log_filter,
            source=self.source_type.value,
        )

    async def fetch_logs_with_filter(self, source: SourceLike, log_filter: str, line: Optional[int] = None) -> FetchResult:
        """Fetch entries matching a Cloud Logging filter expression."""
        return await self.fetch_data(source, line=line, additional_params={"filter": log_filter})
