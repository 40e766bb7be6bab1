"""Signed session tokens.

A token carries ``(customer_id, issued_at_ms)`` and is signed with the
application secret. The signature only proves the token was minted here;
whether it still grants access is decided by re-checking the processor on
every use (see SessionVerifier).
"""

import time
from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadPayload, BadSignature, SignatureExpired, URLSafeTimedSerializer

from paywall_engine.common.exceptions import UnauthenticatedError

SESSION_SALT = "paywall-session"
DEFAULT_MAX_AGE = 60 * 60 * 24 * 30  # 30 days


@dataclass
class SessionClaims:
    customer_id: str
    issued_at: int  # epoch millis


class SessionTokenSerializer:
    """Mint and decode session tokens."""

    def __init__(self, secret_key: str, max_age: int = DEFAULT_MAX_AGE):
        self.max_age = max_age
        self._serializer = URLSafeTimedSerializer(secret_key, salt=SESSION_SALT)

    def dumps(self, customer_id: str, issued_at: Optional[int] = None) -> str:
        if not customer_id:
            raise ValueError("customer_id is required")
        if issued_at is None:
            issued_at = int(time.time() * 1000)
        return self._serializer.dumps({"cid": customer_id, "iat": issued_at})

    def loads(self, token: str) -> SessionClaims:
        """Decode a token, raising UnauthenticatedError if it is not usable."""
        if not token:
            raise UnauthenticatedError(reason="missing_token")
        try:
            payload = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired as e:
            raise UnauthenticatedError(reason="expired_token") from e
        except (BadSignature, BadPayload) as e:
            raise UnauthenticatedError(reason="malformed_token") from e

        if not isinstance(payload, dict):
            raise UnauthenticatedError(reason="malformed_token")
        customer_id = payload.get("cid")
        issued_at = payload.get("iat")
        if not customer_id or not isinstance(customer_id, str) or not isinstance(issued_at, int):
            raise UnauthenticatedError(reason="malformed_token")
        return SessionClaims(customer_id=customer_id, issued_at=issued_at)
