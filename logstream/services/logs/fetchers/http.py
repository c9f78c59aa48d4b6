"""
HTTP helpers shared by the provider fetchers.

request_json() raises the typed errors from logstream.core.exceptions;
perform_http_request() wraps it and folds every expected failure into a
FetchResult so callers never have to catch anything.
"""

import json
from typing import Any, Dict, Optional, Tuple

import httpx

from logstream.core.config import settings
from logstream.core.exceptions import NetworkError, ParseError, UpstreamError
from logstream.core.logging import logger
from ..base import FetchErrorType, FetchResult


JSON = "json"
NDJSON = "ndjson"


def _decode_body(response: httpx.Response, response_format: str) -> Any:
    if not response.content:
        return None

    try:
        if response_format == NDJSON:
            text = response.text.strip()
            # Some deployments answer with a plain JSON array instead of a stream
            if text.startswith("["):
                return json.loads(text)
            return [json.loads(line) for line in text.splitlines() if line.strip()]
        return response.json()
    except (ValueError, UnicodeDecodeError) as e:
        raise ParseError(parse_error=str(e))


async def _send(client: httpx.AsyncClient, method: str, url: str, **kwargs) -> httpx.Response:
    try:
        return await client.request(method, url, **kwargs)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise NetworkError(str(e) or type(e).__name__, url)


async def request_json(
    method: str,
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
    json_body: Any = None,
    content: Optional[bytes] = None,
    timeout: Optional[float] = None,
    response_format: str = JSON
) -> Tuple[httpx.Response, Any]:
    """
    Perform a request and return the response with its decoded body.

    Raises:
        NetworkError: transport level failure
        UpstreamError: non-2xx status
        ParseError: body could not be decoded
    """
    request_kwargs: Dict[str, Any] = {"headers": headers, "params": params}
    if json_body is not None:
        request_kwargs["json"] = json_body
    if content is not None:
        request_kwargs["content"] = content

    if client is not None:
        response = await _send(client, method, url, **request_kwargs)
    else:
        async with httpx.AsyncClient(
            timeout=timeout or settings.http_timeout,
            headers={"User-Agent": settings.user_agent}
        ) as owned_client:
            response = await _send(owned_client, method, url, **request_kwargs)

    if not response.is_success:
        try:
            body = _decode_body(response, JSON)
        except ParseError:
            body = response.text[:500]
        raise UpstreamError(response.status_code, response.reason_phrase, body)

    return response, _decode_body(response, response_format)


async def perform_http_request(
    method: str,
    url: str,
    **kwargs
) -> FetchResult:
    """Run request_json() and convert the outcome into a FetchResult."""
    try:
        response, body = await request_json(method, url, **kwargs)
    except NetworkError as e:
        logger.warning(f"Network error calling {url}: {e.message}")
        return FetchResult.fail(
            e.message,
            {"networkError": True, "url": url},
            FetchErrorType.NETWORK_ERROR
        )
    except UpstreamError as e:
        logger.warning(f"Upstream error calling {url}: {e.message}")
        return FetchResult.fail(
            e.message,
            {"status": e.upstream_status, "statusText": e.reason, "url": url, "responseBody": e.body},
            FetchErrorType.UPSTREAM_ERROR
        )
    except ParseError as e:
        logger.warning(f"Could not parse response from {url}: {e.details.get('parse_error')}")
        return FetchResult.fail(
            e.message,
            {"url": url, "parseError": e.details.get("parse_error")},
            FetchErrorType.PARSE_ERROR
        )

    return FetchResult.ok(
        body,
        {
            "status": response.status_code,
            "statusText": response.reason_phrase,
            "url": str(response.request.url),
        }
    )
