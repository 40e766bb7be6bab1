"""Pydantic schemas for checkout and access code retrieval."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentIntentCreate(BaseModel):
    # Validated in the gateway so a missing amount yields 400, not 422
    amount: Any = None
    email: Optional[str] = None


class PaymentIntentCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_secret: Optional[str] = Field(None, alias="clientSecret")


class AccessCodeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    payment_intent_id: Optional[str] = Field(None, alias="paymentIntentId")


class AccessCodeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_code: str = Field(..., alias="accessCode")
