"""AccessCodeRetriever — bridges the payment redirect and the async webhook write."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from paywall_engine.common.exceptions import (
    AccessCodeStillProcessingError,
    NotFoundError,
    PaymentIncompleteError,
)
from paywall_engine.gateway.base import ProcessorGateway

logger = logging.getLogger(__name__)

READY = "ready"
PENDING = "pending"

DEFAULT_ATTEMPTS = 5
DEFAULT_DELAY = 2.0  # seconds


@dataclass
class AccessCodeLookup:
    """Result of one lookup: either the code, or pending until the webhook lands."""

    status: str
    customer_id: str
    access_code: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.status == READY


class AccessCodeRetriever:
    """Resolves the access code for a just-completed payment."""

    def __init__(
        self,
        gateway: ProcessorGateway,
        attempts: int = DEFAULT_ATTEMPTS,
        delay: float = DEFAULT_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.gateway = gateway
        self.attempts = attempts
        self.delay = delay
        self._sleep = sleep

    async def get_access_code(self, email: str, payment_intent_id: str) -> AccessCodeLookup:
        """Single, non-blocking lookup.

        Raises:
            PaymentIncompleteError: the payment intent has not succeeded.
            NotFoundError: unknown payment intent, or no customer for ``email``.
        """
        try:
            payment_intent = await self.gateway.retrieve_payment_intent(payment_intent_id)
        except NotFoundError as e:
            raise NotFoundError("Payment not found") from e
        if not payment_intent.succeeded:
            raise PaymentIncompleteError(status=payment_intent.status)

        customer = await self.gateway.find_customer_by_email(email)
        if customer is None:
            raise NotFoundError("Customer not found")

        if not customer.access_code:
            return AccessCodeLookup(status=PENDING, customer_id=customer.id)
        return AccessCodeLookup(
            status=READY, customer_id=customer.id, access_code=customer.access_code
        )

    async def wait_for_access_code(
        self,
        email: str,
        payment_intent_id: str,
        attempts: Optional[int] = None,
        delay: Optional[float] = None,
    ) -> str:
        """Poll until the code is written, at most ``attempts`` times ``delay`` apart.

        Payment-incomplete and not-found errors propagate immediately; only
        the pending state is retried.

        Raises:
            AccessCodeStillProcessingError: every attempt came back pending.
        """
        attempts = self.attempts if attempts is None else attempts
        delay = self.delay if delay is None else delay

        for attempt in range(attempts):
            lookup = await self.get_access_code(email, payment_intent_id)
            if lookup.ready:
                return lookup.access_code
            logger.debug(
                "Access code for %s pending (attempt %d/%d)",
                payment_intent_id, attempt + 1, attempts,
            )
            if attempt < attempts - 1:
                await self._sleep(delay)

        logger.info("Access code for %s still processing after %d attempts", payment_intent_id, attempts)
        raise AccessCodeStillProcessingError()
