"""Read-through views over payment processor objects.

Nothing here is persisted locally: every instance is a snapshot of the
processor's record at the time it was fetched.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

# Customer.metadata keys owned by the entitlement issuer
ACCESS_CODE_KEY = "accessCode"
PAYMENT_INTENT_KEY = "paymentIntentId"
LAST_PAYMENT_DATE_KEY = "lastPaymentDate"

PAYMENT_SUCCEEDED = "succeeded"


@dataclass
class Customer:
    """Processor customer record, the sole entitlement store."""

    id: str
    email: Optional[str] = None
    metadata: dict[str, str] = field(default_factory=dict)
    deleted: bool = False

    @property
    def access_code(self) -> str:
        return self.metadata.get(ACCESS_CODE_KEY, "") or ""

    @property
    def payment_intent_id(self) -> str:
        return self.metadata.get(PAYMENT_INTENT_KEY, "") or ""


@dataclass
class PaymentIntent:
    """A single checkout attempt. Status transitions belong to the processor."""

    id: str
    amount: int
    currency: str
    status: str
    customer_id: Optional[str] = None
    metadata: dict[str, str] = field(default_factory=dict)
    client_secret: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == PAYMENT_SUCCEEDED

    @property
    def email(self) -> str:
        return self.metadata.get("email", "") or ""


@dataclass
class WebhookEvent:
    """A verified processor event."""

    id: str
    type: str
    data_object: dict[str, Any] = field(default_factory=dict)
    created: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "WebhookEvent":
        data = payload.get("data")
        obj = data.get("object") if isinstance(data, dict) else None
        return cls(
            id=payload.get("id", ""),
            type=payload.get("type", ""),
            data_object=obj if isinstance(obj, dict) else {},
            created=payload.get("created"),
        )

    def payment_intent(self) -> PaymentIntent:
        """Interpret ``data.object`` as a payment intent."""
        obj = self.data_object
        customer = obj.get("customer")
        if isinstance(customer, dict):
            customer = customer.get("id")
        return PaymentIntent(
            id=obj.get("id", ""),
            amount=obj.get("amount", 0) or 0,
            currency=obj.get("currency", "") or "",
            status=obj.get("status", "") or "",
            customer_id=customer or None,
            metadata=dict(obj.get("metadata") or {}),
            client_secret=obj.get("client_secret"),
        )
