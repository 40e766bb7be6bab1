"""Processor gateway: the only path to payment and customer state."""

from paywall_engine.gateway.base import ProcessorGateway, validate_amount
from paywall_engine.gateway.models import Customer, PaymentIntent, WebhookEvent

__all__ = [
    "ProcessorGateway",
    "validate_amount",
    "Customer",
    "PaymentIntent",
    "WebhookEvent",
]
