"""Authenticator — exchanges (email, access code) for a session token."""

import hmac
import logging
import time
from dataclasses import dataclass
from typing import NoReturn, Optional

from paywall_engine.auth.tokens import SessionTokenSerializer
from paywall_engine.common.exceptions import AuthError, NotFoundError, ValidationError
from paywall_engine.entitlements.codes import is_well_formed, normalize_access_code
from paywall_engine.gateway.base import ProcessorGateway

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    customer_id: str
    email: Optional[str]
    token: str
    issued_at: int  # epoch millis


class Authenticator:
    """Validates credentials against processor state. Never writes to it."""

    def __init__(self, gateway: ProcessorGateway, tokens: SessionTokenSerializer):
        self.gateway = gateway
        self.tokens = tokens

    async def login(self, email: str, access_code: str) -> LoginResult:
        """
        Check, in order:
        1. the supplied code is shaped like an access code
        2. a customer exists for ``email``
        3. its stored access code matches (case-insensitive)
        4. the payment intent on record, if any, has succeeded

        Every failed check raises AuthError with the same caller-facing
        message; ``reason`` says which one failed.
        """
        email = (email or "").strip()
        supplied = normalize_access_code(access_code)
        if not email or not supplied:
            raise ValidationError("Email and access code are required")
        if not is_well_formed(supplied):
            self._reject("malformed_code", email)

        customer = await self.gateway.find_customer_by_email(email)
        if customer is None:
            self._reject("unknown_customer", email)

        stored = customer.access_code
        if not stored or not hmac.compare_digest(stored.encode(), supplied.encode()):
            self._reject("code_mismatch", email)

        if customer.payment_intent_id:
            try:
                payment_intent = await self.gateway.retrieve_payment_intent(
                    customer.payment_intent_id
                )
            except NotFoundError:
                self._reject("payment_missing", email)
            if not payment_intent.succeeded:
                self._reject("payment_incomplete", email)

        issued_at = int(time.time() * 1000)
        token = self.tokens.dumps(customer.id, issued_at=issued_at)
        logger.info("Login succeeded", extra={"customer_id": customer.id})
        return LoginResult(
            customer_id=customer.id,
            email=customer.email or email,
            token=token,
            issued_at=issued_at,
        )

    @staticmethod
    def _reject(reason: str, email: str) -> NoReturn:
        logger.info("Login rejected (%s) for %s", reason, email)
        raise AuthError(reason=reason)
