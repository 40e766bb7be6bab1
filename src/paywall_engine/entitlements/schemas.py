"""Pydantic schemas for entitlement issuance."""

from typing import Optional

from pydantic import BaseModel


class IssueResult(BaseModel):
    """Outcome of handling one webhook event.

    Never surfaced to the processor; the webhook response is always an
    acknowledgement.
    """

    handled: bool
    event_id: str = ""
    event_type: str = ""
    success: bool = True
    duplicate: bool = False
    customer_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    access_code: Optional[str] = None
    error: Optional[str] = None


class WebhookAck(BaseModel):
    received: bool = True
