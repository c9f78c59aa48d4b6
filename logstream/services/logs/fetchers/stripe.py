"""
Stripe event fetcher.
"""

from typing import Any, Dict, List, Optional

from logstream.core.exceptions import ConfigValidationError
from ..base import FetchResult, LogSourceType
from .base import Fetcher
from .http import perform_http_request
from .validation import SourceLike, clamp_limit, get_config_value, resolve_config


STRIPE_API_URL = "https://api.stripe.com/v1"


class StripeFetcher(Fetcher):
    """Reads account events (payments, invoices, customers) from Stripe"""

    source_type = LogSourceType.STRIPE
    display_name = "Stripe"
    required_fields = ("secretKey",)
    default_limit = 20
    max_limit = 100

    def check_config(self, config: Dict[str, Any]) -> List[ConfigValidationError]:
        secret_key = config.get("secretKey")
        if not isinstance(secret_key, str) or not secret_key.startswith("sk_"):
            return [ConfigValidationError(self.display_name, "secretKey", 'must start with "sk_"')]
        return []

    def _headers(self, config: Dict[str, Any]) -> Dict[str, str]:
        return {"Authorization": f"Bearer {get_config_value(config, 'secretKey')}"}

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
        for key in ("type", "created"):
            if additional_params.get(key):
                params[key] = additional_params[key]

        result = await perform_http_request(
            "GET",
            f"{STRIPE_API_URL}/events",
            headers=self._headers(config),
            params=params,
            **self.request_kwargs()
        )

        if not result.success:
            return result.with_metadata(source=self.source_type.value)

        body = result.data if isinstance(result.data, dict) else {}
        events = body.get("data") or []
        return FetchResult.ok(
            events,
            {
                **result.metadata,
                "requestedLimit": limit,
                "totalCount": len(events) if body.get("object") == "list" else 0,
                "hasMore": bool(body.get("has_more")),
                "source": self.source_type.value,
            }
        )

    async def fetch_payment_intent(self, source: SourceLike, payment_intent_id: str) -> FetchResult:
        """Fetch a payment intent by id."""
        return await self._fetch_object(source, "payment_intents", payment_intent_id, "paymentIntentId")

    async def fetch_customer(self, source: SourceLike, customer_id: str) -> FetchResult:
        """Fetch a customer by id."""
        return await self._fetch_object(source, "customers", customer_id, "customerId")

    async def _fetch_object(self, source: SourceLike, collection: str, object_id: str, id_key: str) -> FetchResult:
        if not self.validate_config(source):
            return self.invalid_config_result(source)

        config = resolve_config(source)
        result = await perform_http_request(
            "GET",
            f"{STRIPE_API_URL}/{collection}/{object_id}",
            headers=self._headers(config),
            **self.request_kwargs()
        )
        return result.with_metadata(**{id_key: object_id, "source": self.source_type.value})
