"""Processor gateway interface.

Everything the entitlement pipeline knows about the payment processor goes
through this capability. Implementations raise ``ProcessorError`` on
transport/auth failures and ``NotFoundError`` for missing remote objects.
"""

from abc import ABC, abstractmethod
from typing import Optional

from paywall_engine.common.exceptions import ValidationError
from paywall_engine.gateway.models import Customer, PaymentIntent, WebhookEvent
from paywall_engine.gateway.signature import DEFAULT_TOLERANCE, construct_event


def validate_amount(amount) -> int:
    """Return ``amount`` if it is a positive integer, else raise ValidationError."""
    if amount is None:
        raise ValidationError("Amount is required")
    # bool is an int subclass; True is not a price
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError("Amount must be a positive integer")
    return amount


class ProcessorGateway(ABC):
    """Typed capability over the external payment/customer API."""

    webhook_tolerance: Optional[int] = DEFAULT_TOLERANCE

    @abstractmethod
    async def create_payment_intent(
        self,
        amount: int,
        currency: Optional[str] = None,
        customer_id: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None,
    ) -> PaymentIntent:
        ...

    @abstractmethod
    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        ...

    @abstractmethod
    async def find_customer_by_email(self, email: str) -> Optional[Customer]:
        """Return the first customer with this email, or None."""

    @abstractmethod
    async def create_customer(self, email: Optional[str] = None) -> Customer:
        ...

    @abstractmethod
    async def retrieve_customer(self, customer_id: str) -> Customer:
        ...

    @abstractmethod
    async def update_customer_metadata(
        self, customer_id: str, patch: dict[str, str]
    ) -> Customer:
        ...

    async def find_or_create_customer_by_email(self, email: str) -> Customer:
        """Look a customer up by email, creating one when none exists.

        First match wins if the processor holds duplicates.
        """
        customer = await self.find_customer_by_email(email)
        if customer is not None:
            return customer
        return await self.create_customer(email=email)

    def verify_webhook_signature(
        self, raw_body: bytes, signature_header: str, secret: str
    ) -> WebhookEvent:
        return construct_event(
            raw_body, signature_header, secret, tolerance=self.webhook_tolerance
        )
