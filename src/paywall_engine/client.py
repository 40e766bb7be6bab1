"""
PaywallClient SDK — sync client for Paywall-Engine.

Drives the buyer-side flow: create a payment intent, wait for the webhook to
issue an access code, log in, and check the session. The session cookie is
kept in the underlying httpx cookie jar.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx

READY = "ready"
PENDING = "pending"
STILL_PROCESSING = "still_processing"
PAYMENT_INCOMPLETE = "payment_incomplete"
NOT_FOUND = "not_found"
ERROR = "error"


@dataclass
class ClientPaymentIntent:
    """Result of create_payment_intent()."""

    success: bool
    client_secret: Optional[str] = None
    code: str = ""
    message: str = ""


@dataclass
class ClientAccessCodeResult:
    """Result of get_access_code() / wait_for_access_code()."""

    status: str
    access_code: Optional[str] = None
    message: str = ""
    attempts: int = 1

    @property
    def ready(self) -> bool:
        return self.status == READY


@dataclass
class ClientLoginResult:
    """Result of login()."""

    success: bool
    customer_id: Optional[str] = None
    code: str = ""
    message: str = ""


@dataclass
class ClientSession:
    """Result of verify_session()."""

    authenticated: bool
    email: Optional[str] = None
    customer_id: Optional[str] = None


class PaywallClient:
    """
    Synchronous HTTP client for Paywall-Engine.

    Can be wrapped in async by consumers; designed for simplicity in sync contexts.
    """

    def __init__(
        self,
        server_url: str = "http://localhost:8080",
        timeout: int = 30,
        max_retries: int = 3,
        retry_backoff_base: float = 0.5,
        poll_attempts: int = 5,
        poll_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.server_url = server_url.rstrip("/")
        self.max_retries = max_retries
        self.retry_backoff_base = retry_backoff_base
        self.poll_attempts = poll_attempts
        self.poll_delay = poll_delay
        self._sleep = sleep
        self._http = httpx.Client(
            base_url=self.server_url,
            timeout=timeout,
        )

    def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Central HTTP method with retry and structured error handling.

        Retries on:
        - httpx.TimeoutException
        - 5xx status codes
        - 429 (rate limit)

        No retry on other 4xx errors; their JSON body is returned with
        ``status`` added.
        """
        last_error = None
        for attempt in range(self.max_retries):
            try:
                resp = getattr(self._http, method)(path, **kwargs)
                if resp.status_code >= 500 or resp.status_code == 429:
                    last_error = f"HTTP {resp.status_code}"
                    if attempt < self.max_retries - 1:
                        self._sleep(self.retry_backoff_base * (2 ** attempt))
                        continue
                    return {
                        "error": f"Server error: {resp.status_code}",
                        "code": "SERVER_ERROR",
                        "status": resp.status_code,
                    }
                if resp.status_code >= 400:
                    try:
                        body = resp.json()
                    except json.JSONDecodeError:
                        body = {}
                    if not isinstance(body, dict):
                        body = {}
                    body.setdefault("error", f"Client error: {resp.status_code}")
                    body.setdefault("code", "CLIENT_ERROR")
                    body["status"] = resp.status_code
                    return body
                return resp.json()
            except httpx.TimeoutException:
                last_error = "timeout"
                if attempt < self.max_retries - 1:
                    self._sleep(self.retry_backoff_base * (2 ** attempt))
                    continue
            except httpx.HTTPError as e:
                last_error = str(e)
                if attempt < self.max_retries - 1:
                    self._sleep(self.retry_backoff_base * (2 ** attempt))
                    continue
            except json.JSONDecodeError:
                return {"error": "Invalid JSON response", "code": "JSON_ERROR"}

        return {"error": f"All {self.max_retries} retries exhausted: {last_error}", "code": "CONNECTION_ERROR"}

    # ── Checkout ──

    def create_payment_intent(self, amount: int, email: Optional[str] = None) -> ClientPaymentIntent:
        body: dict[str, Any] = {"amount": amount}
        if email:
            body["email"] = email
        data = self._request("post", "/create-payment-intent", json=body)
        if "error" in data:
            return ClientPaymentIntent(
                success=False, code=data.get("code", "ERROR"), message=data.get("error", ""),
            )
        return ClientPaymentIntent(success=True, client_secret=data.get("clientSecret"))

    def get_access_code(self, email: str, payment_intent_id: str) -> ClientAccessCodeResult:
        """One lookup. ``pending`` means the webhook has not landed yet."""
        data = self._request(
            "post", "/get-access-code",
            json={"email": email, "paymentIntentId": payment_intent_id},
        )
        if data.get("accessCode"):
            return ClientAccessCodeResult(status=READY, access_code=data["accessCode"])

        message = data.get("error", "")
        if data.get("pending"):
            return ClientAccessCodeResult(status=PENDING, message=message)
        if data.get("code") == "PAYMENT_INCOMPLETE":
            return ClientAccessCodeResult(status=PAYMENT_INCOMPLETE, message=message)
        if data.get("status") == 404:
            return ClientAccessCodeResult(status=NOT_FOUND, message=message)
        return ClientAccessCodeResult(status=ERROR, message=message)

    def wait_for_access_code(
        self,
        email: str,
        payment_intent_id: str,
        attempts: Optional[int] = None,
        delay: Optional[float] = None,
    ) -> ClientAccessCodeResult:
        """Poll get_access_code() while it reports pending.

        Stops early on any non-pending answer. After ``attempts`` pending
        answers returns status ``still_processing``: the payment went through
        and the caller should come back later.
        """
        attempts = self.poll_attempts if attempts is None else attempts
        delay = self.poll_delay if delay is None else delay

        for attempt in range(1, attempts + 1):
            result = self.get_access_code(email, payment_intent_id)
            result.attempts = attempt
            if result.status != PENDING:
                return result
            if attempt < attempts:
                self._sleep(delay)

        return ClientAccessCodeResult(
            status=STILL_PROCESSING,
            message="Your payment is still being processed. Please try again in a few minutes.",
            attempts=attempts,
        )

    # ── Sessions ──

    def login(self, email: str, access_code: str) -> ClientLoginResult:
        data = self._request("post", "/login", json={"email": email, "accessCode": access_code})
        if "error" in data:
            return ClientLoginResult(
                success=False, code=data.get("code", "ERROR"), message=data.get("error", ""),
            )
        return ClientLoginResult(success=data.get("success", False), customer_id=data.get("customerId"))

    def verify_session(self) -> ClientSession:
        data = self._request("get", "/verify-session")
        if not data.get("authenticated"):
            return ClientSession(authenticated=False)
        return ClientSession(
            authenticated=True,
            email=data.get("email"),
            customer_id=data.get("customerId"),
        )

    def logout(self) -> bool:
        data = self._request("post", "/logout")
        return data.get("success", False)

    # ── Lifecycle ──

    def close(self) -> None:
        """Close the HTTP client."""
        self._http.close()
