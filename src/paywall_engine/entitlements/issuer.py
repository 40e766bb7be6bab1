"""EntitlementIssuer — turns succeeded payment intents into stored access codes."""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from paywall_engine.entitlements.codes import generate_access_code
from paywall_engine.entitlements.dedupe import ProcessedEventCache
from paywall_engine.entitlements.schemas import IssueResult
from paywall_engine.gateway.base import ProcessorGateway
from paywall_engine.gateway.models import (
    ACCESS_CODE_KEY,
    LAST_PAYMENT_DATE_KEY,
    PAYMENT_INTENT_KEY,
    Customer,
    PaymentIntent,
    WebhookEvent,
)

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED_EVENT = "payment_intent.succeeded"
PAYMENT_FAILED_EVENT = "payment_intent.payment_failed"


class EntitlementIssuer:
    """Writes a fresh access code into the paying customer's metadata.

    Redelivery of the same event regenerates the code and overwrites the
    previous one unless an ``event_cache`` is supplied.
    """

    def __init__(
        self,
        gateway: ProcessorGateway,
        event_cache: Optional[ProcessedEventCache] = None,
        code_factory: Callable[[], str] = generate_access_code,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.gateway = gateway
        self.event_cache = event_cache
        self.code_factory = code_factory
        self.clock = clock

    async def handle_event(self, event: WebhookEvent) -> IssueResult:
        """Process one verified webhook event.

        Steps:
        1. Skip anything but payment_intent.succeeded
        2. Resolve (or create) the customer
        3. Generate an access code
        4. Store it in customer metadata

        Failures in steps 2-4 are logged and returned, never raised.
        """
        if event.type == PAYMENT_FAILED_EVENT:
            logger.warning("Payment failed: %s", event.data_object.get("id", ""))
            return IssueResult(handled=False, event_id=event.id, event_type=event.type)

        if event.type != PAYMENT_SUCCEEDED_EVENT:
            logger.debug("Ignoring Stripe event type: %s", event.type)
            return IssueResult(handled=False, event_id=event.id, event_type=event.type)

        payment_intent = event.payment_intent()
        logger.info("Payment succeeded: %s", payment_intent.id)

        if self.event_cache is not None and self.event_cache.seen(event.id):
            logger.info("Duplicate delivery of event %s ignored", event.id)
            return IssueResult(
                handled=True,
                event_id=event.id,
                event_type=event.type,
                duplicate=True,
                payment_intent_id=payment_intent.id,
            )

        try:
            customer = await self._resolve_customer(payment_intent)
            access_code = self.code_factory()
            await self.gateway.update_customer_metadata(
                customer.id,
                {
                    ACCESS_CODE_KEY: access_code,
                    PAYMENT_INTENT_KEY: payment_intent.id,
                    LAST_PAYMENT_DATE_KEY: self.clock().isoformat(),
                },
            )
        except Exception as e:
            logger.exception("Failed to issue access code for %s", payment_intent.id)
            return IssueResult(
                handled=True,
                event_id=event.id,
                event_type=event.type,
                success=False,
                payment_intent_id=payment_intent.id,
                error=getattr(e, "message", "") or str(e),
            )

        if self.event_cache is not None:
            self.event_cache.add(event.id)

        logger.info(
            "Access code issued",
            extra={"customer_id": customer.id, "payment_intent_id": payment_intent.id},
        )
        return IssueResult(
            handled=True,
            event_id=event.id,
            event_type=event.type,
            customer_id=customer.id,
            payment_intent_id=payment_intent.id,
            access_code=access_code,
        )

    async def _resolve_customer(self, payment_intent: PaymentIntent) -> Customer:
        if payment_intent.customer_id:
            return await self.gateway.retrieve_customer(payment_intent.customer_id)

        if payment_intent.email:
            return await self.gateway.find_or_create_customer_by_email(payment_intent.email)

        logger.warning(
            "Payment intent %s carries no customer or email; creating anonymous customer",
            payment_intent.id,
        )
        return await self.gateway.create_customer()
