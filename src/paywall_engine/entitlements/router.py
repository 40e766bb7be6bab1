"""Stripe webhook endpoint."""

import logging

from fastapi import APIRouter, Header, Request

from paywall_engine.common.config import get_settings
from paywall_engine.common.exceptions import SignatureInvalidError
from paywall_engine.common.responses import error_from_exception
from paywall_engine.entitlements.schemas import WebhookAck

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


def _get_gateway():
    from paywall_engine.deps import get_gateway
    return get_gateway()


def _get_issuer():
    from paywall_engine.deps import get_issuer
    return get_issuer()


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header("", alias="Stripe-Signature"),
):
    """Verify and process a Stripe event.

    Once the signature checks out the event is always acknowledged, even
    when issuing the access code fails; Stripe retries non-2xx responses
    and a failed write is remediated by hand.
    """
    body = await request.body()
    secret = get_settings().stripe_webhook_secret

    try:
        event = _get_gateway().verify_webhook_signature(body, stripe_signature, secret)
    except SignatureInvalidError as e:
        logger.warning("Webhook signature verification failed: %s", e.message)
        return error_from_exception(e, 400)

    result = await _get_issuer().handle_event(event)
    if result.handled and not result.success:
        logger.error(
            "Webhook acknowledged without issuing an access code",
            extra={"event_id": event.id, "payment_intent_id": result.payment_intent_id},
        )

    return WebhookAck()
