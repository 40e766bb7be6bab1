"""Integration tests for /login, /logout and /verify-session."""

import pytest

from paywall_engine.deps import get_session_tokens


@pytest.fixture
def paid(gateway):
    pi = gateway.add_payment_intent(status="succeeded", email="a@x.com")
    return gateway.add_customer("a@x.com", accessCode="AB12CD34", paymentIntentId=pi.id)


def _cookie(token: str) -> dict:
    return {"Cookie": f"session_token={token}"}


class TestLogin:
    async def test_success_sets_cookie(self, client, paid):
        resp = await client.post("/login", json={"email": "a@x.com", "accessCode": "ab12cd34"})
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "customerId": paid.id}

        set_cookie = resp.headers["set-cookie"].lower()
        assert set_cookie.startswith("session_token=")
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie
        assert "max-age=2592000" in set_cookie
        assert "path=/" in set_cookie
        assert "secure" not in set_cookie.split(";", 1)[1]

        token = resp.headers["set-cookie"].split(";", 1)[0].split("=", 1)[1]
        assert get_session_tokens().loads(token).customer_id == paid.id

    async def test_wrong_code(self, client, paid):
        resp = await client.post("/login", json={"email": "a@x.com", "accessCode": "ZZZZZZZZ"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Invalid email or access code"
        assert "set-cookie" not in resp.headers

    async def test_unknown_email_same_message(self, client, paid):
        resp = await client.post("/login", json={"email": "b@x.com", "accessCode": "AB12CD34"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Invalid email or access code"

    async def test_payment_not_succeeded(self, client, gateway, paid):
        gateway.set_status(paid.payment_intent_id, "canceled")
        resp = await client.post("/login", json={"email": "a@x.com", "accessCode": "AB12CD34"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Invalid email or access code"

    @pytest.mark.parametrize("body", [{}, {"email": "a@x.com"}, {"accessCode": "AB12CD34"}])
    async def test_missing_fields(self, client, body):
        resp = await client.post("/login", json=body)
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"

    async def test_processor_failure(self, client, gateway):
        gateway.fail_on.add("find_customer_by_email")
        resp = await client.post("/login", json={"email": "a@x.com", "accessCode": "AB12CD34"})
        assert resp.status_code == 500
        assert resp.json()["error"] == "Login failed"


class TestVerifySession:
    async def test_authenticated(self, client, paid):
        token = get_session_tokens().dumps(paid.id)
        resp = await client.get("/verify-session", headers=_cookie(token))
        assert resp.status_code == 200
        assert resp.json() == {"authenticated": True, "email": "a@x.com", "customerId": paid.id}

    async def test_no_cookie(self, client):
        resp = await client.get("/verify-session")
        assert resp.status_code == 401
        assert resp.json() == {"authenticated": False}

    async def test_garbage_cookie(self, client, gateway):
        resp = await client.get("/verify-session", headers=_cookie("garbage"))
        assert resp.status_code == 401
        assert gateway.calls == []

    async def test_revoked_by_clearing_metadata(self, client, gateway, paid):
        token = get_session_tokens().dumps(paid.id)
        assert (await client.get("/verify-session", headers=_cookie(token))).status_code == 200

        gateway.customers[paid.id].metadata.clear()
        resp = await client.get("/verify-session", headers=_cookie(token))
        assert resp.status_code == 401

    async def test_processor_outage_fails_closed(self, client, gateway, paid):
        token = get_session_tokens().dumps(paid.id)
        gateway.fail_on.add("retrieve_customer")
        resp = await client.get("/verify-session", headers=_cookie(token))
        assert resp.status_code == 401


class TestLogout:
    async def test_clears_cookie(self, client):
        resp = await client.post("/logout")
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        set_cookie = resp.headers["set-cookie"].lower()
        assert set_cookie.startswith("session_token=")
        assert "max-age=0" in set_cookie

    async def test_logout_without_session(self, client):
        resp = await client.post("/logout")
        assert resp.status_code == 200
