"""SessionVerifier — re-checks a session token against live processor state."""

import logging
from dataclasses import dataclass
from typing import Optional

from paywall_engine.auth.tokens import SessionTokenSerializer
from paywall_engine.common.exceptions import NotFoundError, ProcessorError, UnauthenticatedError
from paywall_engine.gateway.base import ProcessorGateway

logger = logging.getLogger(__name__)


@dataclass
class VerifiedSession:
    customer_id: str
    email: Optional[str]
    issued_at: int


class SessionVerifier:
    """Stateless verification; nothing is cached between calls.

    Clearing a customer's access code (or a payment moving out of
    ``succeeded``) revokes every outstanding token on the next request.
    """

    def __init__(self, gateway: ProcessorGateway, tokens: SessionTokenSerializer):
        self.gateway = gateway
        self.tokens = tokens

    async def verify(self, token: str) -> VerifiedSession:
        claims = self.tokens.loads(token)

        try:
            customer = await self.gateway.retrieve_customer(claims.customer_id)
            if customer.deleted:
                raise UnauthenticatedError(reason="customer_deleted")
            if not customer.access_code:
                raise UnauthenticatedError(reason="access_revoked")

            if customer.payment_intent_id:
                payment_intent = await self.gateway.retrieve_payment_intent(
                    customer.payment_intent_id
                )
                if not payment_intent.succeeded:
                    raise UnauthenticatedError(reason="payment_incomplete")
        except NotFoundError as e:
            raise UnauthenticatedError(reason="customer_not_found") from e
        except ProcessorError as e:
            # Fail closed: an unverifiable session is not a valid one.
            logger.error("Session re-check failed for %s: %s", claims.customer_id, e.message)
            raise UnauthenticatedError(reason="processor_unavailable") from e

        return VerifiedSession(
            customer_id=customer.id,
            email=customer.email,
            issued_at=claims.issued_at,
        )
