"""
Stripe event formatter.
"""

from typing import Any, Dict, List

from ..base import LogLevel, LogSourceType, UnifiedLogRecord, UnifiedLogRecordBuilder
from .base import Formatter, epoch_seconds_to_iso


def stripe_event_level(event_type: str) -> LogLevel:
    if "failed" in event_type or "dispute" in event_type:
        return LogLevel.ERROR
    if "requires_action" in event_type or "warning" in event_type:
        return LogLevel.WARN
    return LogLevel.INFO


def stripe_event_message(event_type: str, obj: Dict[str, Any]) -> str:
    if event_type == "payment_intent.succeeded":
        amount = obj.get("amount")
        display = f"${amount / 100:.2f}" if isinstance(amount, (int, float)) and amount else "unknown amount"
        return f"Payment succeeded for {display}"
    if event_type == "payment_intent.payment_failed":
        return f"Payment failed for customer {obj.get('customer') or 'unknown'}"
    if event_type == "customer.created":
        return f"New customer created: {obj.get('email') or obj.get('id')}"
    if event_type == "invoice.payment_succeeded":
        return f"Invoice payment succeeded: {obj.get('id')}"
    if event_type == "invoice.payment_failed":
        return f"Invoice payment failed: {obj.get('id')}"
    return f"{event_type.replace('.', ' ').replace('_', ' ')} event occurred"


class StripeFormatter(Formatter):
    """Turns Stripe events into records with human-readable messages"""

    source_type = LogSourceType.STRIPE

    def _format_event(self, event: Dict[str, Any], index: int) -> UnifiedLogRecord:
        event_type = str(event.get("type") or "unknown")
        obj = (event.get("data") or {}).get("object") or {}
        created = event.get("created")

        return (
            UnifiedLogRecordBuilder.create()
            .with_id(event.get("id"))
            .with_timestamp(epoch_seconds_to_iso(created) if created is not None else None)
            .with_source(self.source_type)
            .with_level(stripe_event_level(event_type))
            .with_message(stripe_event_message(event_type, obj))
            .with_meta({
                "eventId": event.get("id"),
                "eventType": event_type,
                "livemode": event.get("livemode"),
                "apiVersion": event.get("api_version"),
                "object": obj or None,
                "customerId": obj.get("customer"),
                "amount": obj.get("amount"),
                "currency": obj.get("currency"),
            })
            .build()
        )

    def format(self, raw: Any) -> List[UnifiedLogRecord]:
        if isinstance(raw, dict) and raw.get("object") == "list":
            raw = raw.get("data")
        if not isinstance(raw, list):
            return self.shape_mismatch(raw)
        return self.format_entries(raw, self._format_event)
