"""Carrier tracking webhooks: signature check, command and handler.

Carriers sign the raw request body with HMAC-SHA256 using the webhook secret
configured on their ShippingProvider. The HTTP layer verifies the signature
before building the command.
"""

import hashlib
import hmac
from datetime import UTC, datetime

from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.shared.errors import NotFound, Unauthorized
from storefront.shipping.provider.management import find_provider_by_code
from storefront.shipping.provider.provider import ShippingProvider
from storefront.shipping.tracking.management import find_tracking
from storefront.shipping.tracking.tracking import OrderTracking, TrackingSource
from storefront.utils.logging import logger


def sign_payload(secret: str, payload: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def webhook_provider(carrier_code: str, payload: bytes, signature: str | None) -> ShippingProvider:
    """The provider a webhook claims to come from, once its signature checks out."""
    provider = find_provider_by_code(carrier_code)
    if provider is None or not provider.is_active or not provider.supports_tracking:
        raise NotFound(f"No tracking webhook for carrier '{carrier_code}'", field="carrier_code")
    if not provider.webhook_secret:
        raise Unauthorized(f"Webhook secret not configured for carrier '{carrier_code}'", field="signature")
    if not signature or not hmac.compare_digest(sign_payload(provider.webhook_secret, payload), signature):
        raise Unauthorized("Invalid webhook signature", field="signature")
    return provider


def parse_event_time(value: str | None) -> datetime:
    """RFC 3339 timestamps from the carrier; anything unreadable means now."""
    if not value:
        return datetime.now(UTC)
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unreadable carrier event time, using now", event_time=value)
        return datetime.now(UTC)
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


@storefront.command(part_of="OrderTracking")
class ProcessCarrierWebhook:
    """Record a status update pushed by a verified carrier."""

    carrier = String(required=True, max_length=100)
    carrier_code = String(required=True, max_length=50)
    tracking_number = String(required=True, max_length=100)
    status = String(required=True, max_length=50)
    status_text = String(max_length=255)
    location = String(max_length=255)
    description = Text()
    event_code = String(max_length=50)
    event_time = String(max_length=50)
    payload = Text()


@storefront.command_handler(part_of=OrderTracking)
class CarrierWebhookHandler:
    @handle(ProcessCarrierWebhook)
    def process_webhook(self, command):
        code = command.carrier_code.strip().lower()
        tracking = find_tracking(tracking_number=command.tracking_number.strip())
        if tracking is None or (tracking.carrier_code and tracking.carrier_code != code):
            raise NotFound(f"Tracking {command.tracking_number} not found", field="tracking_number")

        tracking.record_event(
            command.status,
            status_text=command.status_text,
            location=command.location,
            description=command.description,
            event_code=command.event_code,
            source=TrackingSource.WEBHOOK.value,
            source_data=command.payload,
            event_time=parse_event_time(command.event_time),
        )
        current_domain.repository_for(OrderTracking).add(tracking)
        logger.info(
            "Carrier webhook processed",
            carrier=command.carrier,
            tracking_number=tracking.tracking_number,
            status=tracking.status,
        )
        return tracking.status
