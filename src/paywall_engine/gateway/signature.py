"""Stripe webhook signature verification (v1 scheme)."""

import hashlib
import hmac
import json
import logging
import time
from typing import Optional

from paywall_engine.common.exceptions import SignatureInvalidError
from paywall_engine.gateway.models import WebhookEvent

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 300  # seconds


def compute_signature(payload: bytes, timestamp: str, webhook_secret: str) -> str:
    signed_payload = f"{timestamp}.".encode() + payload
    return hmac.new(
        webhook_secret.encode(),
        signed_payload,
        hashlib.sha256,
    ).hexdigest()


def verify_stripe_signature(
    payload: bytes,
    signature_header: str,
    webhook_secret: str,
    tolerance: Optional[int] = DEFAULT_TOLERANCE,
    now: Optional[float] = None,
) -> bool:
    """Verify a Stripe webhook signature.

    Stripe sends: t=<timestamp>,v1=<signature>[,v1=<signature>...]
    Several v1 entries appear while a signing secret is being rolled;
    any one of them matching is enough.
    """
    if not signature_header or not webhook_secret:
        return False

    timestamp = ""
    signatures = []
    for item in signature_header.split(","):
        key, _, value = item.partition("=")
        key = key.strip()
        if key == "t":
            timestamp = value.strip()
        elif key == "v1":
            signatures.append(value.strip())

    if not timestamp or not signatures:
        return False

    if tolerance is not None:
        try:
            signed_at = int(timestamp)
        except ValueError:
            return False
        current = time.time() if now is None else now
        if abs(current - signed_at) > tolerance:
            logger.warning("Stripe webhook timestamp outside tolerance: %s", timestamp)
            return False

    computed = compute_signature(payload, timestamp, webhook_secret)
    return any(hmac.compare_digest(computed, sig) for sig in signatures)


def construct_event(
    payload: bytes,
    signature_header: str,
    webhook_secret: str,
    tolerance: Optional[int] = DEFAULT_TOLERANCE,
) -> WebhookEvent:
    """Verify the signature and parse the body into a WebhookEvent.

    Raises:
        SignatureInvalidError: header missing, signature mismatch, or the
            verified body is not a Stripe event.
    """
    if not signature_header:
        raise SignatureInvalidError("No signature")

    if not verify_stripe_signature(payload, signature_header, webhook_secret, tolerance):
        raise SignatureInvalidError("Webhook Error: signature verification failed")

    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SignatureInvalidError("Webhook Error: invalid JSON payload") from exc

    if not isinstance(data, dict) or not data.get("id") or not data.get("type"):
        raise SignatureInvalidError("Webhook Error: payload is not an event")
    body = data.get("data")
    if not isinstance(body, dict) or not isinstance(body.get("object"), dict):
        raise SignatureInvalidError("Webhook Error: payload is not an event")

    return WebhookEvent.from_payload(data)
