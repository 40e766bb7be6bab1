"""Checkout endpoints — payment intent creation and access code retrieval."""

import logging

from fastapi import APIRouter

from paywall_engine.checkout.schemas import (
    AccessCodeRequest,
    AccessCodeResponse,
    PaymentIntentCreate,
    PaymentIntentCreated,
)
from paywall_engine.common.exceptions import (
    NotFoundError,
    PaymentIncompleteError,
    ProcessorError,
    ValidationError,
)
from paywall_engine.common.responses import error_from_exception, error_response
from paywall_engine.gateway.base import validate_amount

logger = logging.getLogger(__name__)

router = APIRouter(tags=["checkout"])


def _get_gateway():
    from paywall_engine.deps import get_gateway
    return get_gateway()


def _get_retriever():
    from paywall_engine.deps import get_retriever
    return get_retriever()


@router.post("/create-payment-intent", response_model=PaymentIntentCreated)
async def create_payment_intent(body: PaymentIntentCreate):
    """Create a payment intent, attaching a customer when an email is given."""
    gateway = _get_gateway()
    email = (body.email or "").strip()
    try:
        amount = validate_amount(body.amount)
        customer_id = None
        if email:
            customer = await gateway.find_or_create_customer_by_email(email)
            customer_id = customer.id

        payment_intent = await gateway.create_payment_intent(
            amount,
            customer_id=customer_id,
            metadata={"email": email},
        )
    except ValidationError as e:
        return error_from_exception(e, 400)
    except (ProcessorError, NotFoundError):
        logger.exception("Error creating payment intent")
        return error_response("Failed to create payment intent", 500, code="PROCESSOR_ERROR")

    return PaymentIntentCreated(client_secret=payment_intent.client_secret)


@router.post("/get-access-code", response_model=AccessCodeResponse)
async def get_access_code(body: AccessCodeRequest):
    """Single lookup; callers retry while the response says ``pending``."""
    email = (body.email or "").strip()
    payment_intent_id = (body.payment_intent_id or "").strip()
    if not email or not payment_intent_id:
        return error_response(
            "Email and payment intent ID are required", 400, code="VALIDATION_ERROR"
        )

    retriever = _get_retriever()
    try:
        lookup = await retriever.get_access_code(email, payment_intent_id)
    except PaymentIncompleteError as e:
        return error_from_exception(e, 400)
    except NotFoundError as e:
        return error_from_exception(e, 404)
    except ProcessorError:
        logger.exception("Error getting access code")
        return error_response("Failed to get access code", 500, code="PROCESSOR_ERROR")

    if not lookup.ready:
        return error_response(
            "Access code not yet available. Please retry shortly.",
            404,
            code="PENDING",
            pending=True,
        )
    return AccessCodeResponse(access_code=lookup.access_code)
