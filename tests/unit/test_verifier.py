"""Tests for SessionVerifier — per-request revalidation."""

import pytest

from paywall_engine.auth.tokens import SessionTokenSerializer
from paywall_engine.auth.verifier import SessionVerifier
from paywall_engine.common.exceptions import UnauthenticatedError
from tests.fakes import InMemoryGateway


@pytest.fixture
def gw():
    return InMemoryGateway()


@pytest.fixture
def tokens():
    return SessionTokenSerializer("test-secret")


@pytest.fixture
def verifier(gw, tokens):
    return SessionVerifier(gw, tokens)


@pytest.fixture
def paid(gw):
    pi = gw.add_payment_intent(status="succeeded", email="a@x.com")
    return gw.add_customer("a@x.com", accessCode="AB12CD34", paymentIntentId=pi.id)


class TestVerify:
    async def test_valid_session(self, verifier, tokens, paid):
        session = await verifier.verify(tokens.dumps(paid.id, issued_at=123))
        assert session.customer_id == paid.id
        assert session.email == "a@x.com"
        assert session.issued_at == 123

    async def test_every_call_rechecks_processor(self, gw, verifier, tokens, paid):
        token = tokens.dumps(paid.id)
        await verifier.verify(token)
        await verifier.verify(token)
        assert gw.calls.count("retrieve_customer") == 2
        assert gw.calls.count("retrieve_payment_intent") == 2

    async def test_cleared_metadata_revokes(self, gw, verifier, tokens, paid):
        token = tokens.dumps(paid.id)
        await verifier.verify(token)
        gw.customers[paid.id].metadata.clear()
        with pytest.raises(UnauthenticatedError) as exc:
            await verifier.verify(token)
        assert exc.value.reason == "access_revoked"

    async def test_deleted_customer(self, gw, verifier, tokens, paid):
        gw.delete_customer(paid.id)
        with pytest.raises(UnauthenticatedError) as exc:
            await verifier.verify(tokens.dumps(paid.id))
        assert exc.value.reason == "customer_not_found"

    async def test_unknown_customer(self, verifier, tokens):
        with pytest.raises(UnauthenticatedError):
            await verifier.verify(tokens.dumps("cus_unknown"))

    async def test_payment_reversed(self, gw, verifier, tokens, paid):
        gw.set_status(paid.payment_intent_id, "canceled")
        with pytest.raises(UnauthenticatedError) as exc:
            await verifier.verify(tokens.dumps(paid.id))
        assert exc.value.reason == "payment_incomplete"

    async def test_no_payment_intent_on_record(self, gw, verifier, tokens):
        customer = gw.add_customer("b@x.com", accessCode="ZY98XW76")
        session = await verifier.verify(tokens.dumps(customer.id))
        assert session.customer_id == customer.id

    async def test_malformed_token_makes_no_processor_call(self, gw, verifier):
        with pytest.raises(UnauthenticatedError):
            await verifier.verify("not-a-token")
        assert gw.calls == []

    async def test_processor_outage_fails_closed(self, gw, verifier, tokens, paid):
        gw.fail_on.add("retrieve_customer")
        with pytest.raises(UnauthenticatedError) as exc:
            await verifier.verify(tokens.dumps(paid.id))
        assert exc.value.reason == "processor_unavailable"
