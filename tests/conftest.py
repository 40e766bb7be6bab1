"""Shared test fixtures for Paywall-Engine."""

import json
import os
import time

import pytest
from httpx import ASGITransport, AsyncClient

from paywall_engine.gateway.signature import compute_signature
from tests.fakes import InMemoryGateway


SECRET_KEY = "test-secret-key-for-unit-tests"
WEBHOOK_SECRET = "whsec_test_secret"


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header for ``payload``."""
    ts = str(int(time.time()) if timestamp is None else timestamp)
    return f"t={ts},v1={compute_signature(payload, ts, secret)}"


def succeeded_event(payment_intent: dict, event_id: str = "evt_1") -> dict:
    return {
        "id": event_id,
        "object": "event",
        "type": "payment_intent.succeeded",
        "created": int(time.time()),
        "data": {"object": {"object": "payment_intent", "status": "succeeded", **payment_intent}},
    }


@pytest.fixture
def webhook_secret():
    return WEBHOOK_SECRET


@pytest.fixture
def gateway():
    return InMemoryGateway()


@pytest.fixture
def app(gateway):
    """Create a test app wired to the in-memory gateway."""
    os.environ["PAYWALL_SECRET_KEY"] = SECRET_KEY
    os.environ["PAYWALL_STRIPE_WEBHOOK_SECRET"] = WEBHOOK_SECRET
    os.environ["PAYWALL_ENVIRONMENT"] = "development"
    os.environ.pop("PAYWALL_WEBHOOK_DEDUPE", None)

    # Clear caches and singletons so new env vars take effect
    from paywall_engine.common.config import get_settings
    get_settings.cache_clear()

    from paywall_engine.deps import set_gateway
    set_gateway(gateway)

    from paywall_engine.app import create_app
    return create_app()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    from paywall_engine.deps import reset_singletons
    reset_singletons()


@pytest.fixture
def post_event(client):
    """Deliver a signed webhook event to the app."""

    async def _post(event: dict, secret: str = WEBHOOK_SECRET):
        body = json.dumps(event).encode()
        return await client.post(
            "/webhook",
            content=body,
            headers={"Stripe-Signature": sign_payload(body, secret)},
        )

    return _post
