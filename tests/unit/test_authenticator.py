"""Tests for Authenticator.login."""

from typing import NoReturn, get_type_hints

import pytest

from paywall_engine.auth.authenticator import Authenticator
from paywall_engine.auth.tokens import SessionTokenSerializer
from paywall_engine.common.exceptions import AuthError, ProcessorError, ValidationError
from tests.fakes import InMemoryGateway

GENERIC = "Invalid email or access code"


@pytest.fixture
def gw():
    return InMemoryGateway()


@pytest.fixture
def tokens():
    return SessionTokenSerializer("test-secret")


@pytest.fixture
def auth(gw, tokens):
    return Authenticator(gw, tokens)


def _paid_customer(gw, email="a@x.com", code="AB12CD34", status="succeeded"):
    pi = gw.add_payment_intent(status=status, email=email)
    return gw.add_customer(email, accessCode=code, paymentIntentId=pi.id), pi


class TestLoginSuccess:
    async def test_exact_code(self, gw, auth, tokens):
        customer, _ = _paid_customer(gw)
        result = await auth.login("a@x.com", "AB12CD34")
        assert result.customer_id == customer.id
        assert result.email == "a@x.com"
        assert tokens.loads(result.token).customer_id == customer.id

    async def test_case_insensitive(self, gw, auth):
        customer, _ = _paid_customer(gw)
        result = await auth.login("a@x.com", "ab12cd34")
        assert result.customer_id == customer.id

    async def test_surrounding_whitespace_ignored(self, gw, auth):
        _paid_customer(gw)
        await auth.login(" a@x.com ", "  ab12CD34 ")

    async def test_without_payment_intent_on_record(self, gw, auth):
        customer = gw.add_customer("a@x.com", accessCode="AB12CD34")
        result = await auth.login("a@x.com", "AB12CD34")
        assert result.customer_id == customer.id
        assert "retrieve_payment_intent" not in gw.calls

    async def test_does_not_mutate_processor_state(self, gw, auth):
        customer, _ = _paid_customer(gw)
        before = dict(gw.customers[customer.id].metadata)
        await auth.login("a@x.com", "AB12CD34")
        assert gw.customers[customer.id].metadata == before
        assert "update_customer_metadata" not in gw.calls


class TestLoginFailure:
    async def test_unknown_email(self, auth):
        with pytest.raises(AuthError) as exc:
            await auth.login("nobody@x.com", "AB12CD34")
        assert exc.value.reason == "unknown_customer"
        assert exc.value.message == GENERIC

    async def test_wrong_code(self, gw, auth):
        _paid_customer(gw)
        with pytest.raises(AuthError) as exc:
            await auth.login("a@x.com", "ZZZZZZZZ")
        assert exc.value.reason == "code_mismatch"
        assert exc.value.message == GENERIC

    async def test_no_code_stored(self, gw, auth):
        gw.add_customer("a@x.com")
        with pytest.raises(AuthError) as exc:
            await auth.login("a@x.com", "AB12CD34")
        assert exc.value.reason == "code_mismatch"

    async def test_code_belongs_to_other_email(self, gw, auth):
        _paid_customer(gw, email="a@x.com", code="AB12CD34")
        _paid_customer(gw, email="b@x.com", code="ZY98XW76")
        with pytest.raises(AuthError):
            await auth.login("b@x.com", "AB12CD34")

    @pytest.mark.parametrize("status", ["processing", "canceled", "requires_action"])
    async def test_payment_not_succeeded(self, gw, auth, status):
        _paid_customer(gw, status=status)
        with pytest.raises(AuthError) as exc:
            await auth.login("a@x.com", "AB12CD34")
        assert exc.value.reason == "payment_incomplete"
        assert exc.value.message == GENERIC

    async def test_payment_intent_missing(self, gw, auth):
        gw.add_customer("a@x.com", accessCode="AB12CD34", paymentIntentId="pi_gone")
        with pytest.raises(AuthError) as exc:
            await auth.login("a@x.com", "AB12CD34")
        assert exc.value.reason == "payment_missing"

    @pytest.mark.parametrize("email,code", [("", "AB12CD34"), ("a@x.com", ""), ("a@x.com", "   ")])
    async def test_missing_input(self, auth, email, code):
        with pytest.raises(ValidationError):
            await auth.login(email, code)

    async def test_processor_failure_propagates(self, gw, auth):
        gw.fail_on.add("find_customer_by_email")
        with pytest.raises(ProcessorError):
            await auth.login("a@x.com", "AB12CD34")

    @pytest.mark.parametrize("code", ["AB12CD3", "AB12CD345", "AB12-D34", "ÄB12CD34"])
    async def test_malformed_code_rejected_without_processor_call(self, gw, auth, code):
        _paid_customer(gw)
        with pytest.raises(AuthError) as exc:
            await auth.login("a@x.com", code)
        assert exc.value.reason == "malformed_code"
        assert exc.value.message == GENERIC
        assert gw.calls == []

    def test_reject_never_returns(self):
        assert get_type_hints(Authenticator._reject)["return"] is NoReturn
        with pytest.raises(AuthError):
            Authenticator._reject("code_mismatch", "a@x.com")
