"""Stripe implementation of the processor gateway."""

import asyncio
import logging
import time
from functools import partial
from typing import Any, Callable, Optional

import stripe

from paywall_engine.common.config import PaywallSettings
from paywall_engine.common.exceptions import NotFoundError, ProcessorError
from paywall_engine.gateway.base import ProcessorGateway, validate_amount
from paywall_engine.gateway.models import Customer, PaymentIntent

logger = logging.getLogger(__name__)


def _as_dict(obj: Any) -> dict[str, Any]:
    """Flatten a StripeObject (or plain dict) one level into a dict."""
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return dict(obj)
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return dict(to_dict())
    return dict(obj)


def _customer_from_stripe(obj: Any) -> Customer:
    data = _as_dict(obj)
    return Customer(
        id=data.get("id", ""),
        email=data.get("email") or None,
        metadata={k: str(v) for k, v in _as_dict(data.get("metadata")).items()},
        deleted=bool(data.get("deleted", False)),
    )


def _payment_intent_from_stripe(obj: Any) -> PaymentIntent:
    data = _as_dict(obj)
    customer = data.get("customer")
    if customer is not None and not isinstance(customer, str):
        customer = _as_dict(customer).get("id")
    return PaymentIntent(
        id=data.get("id", ""),
        amount=data.get("amount", 0) or 0,
        currency=data.get("currency", "") or "",
        status=data.get("status", "") or "",
        customer_id=customer or None,
        metadata={k: str(v) for k, v in _as_dict(data.get("metadata")).items()},
        client_secret=data.get("client_secret"),
    )


class StripeGateway(ProcessorGateway):
    """Processor gateway backed by the Stripe API.

    The Stripe SDK is blocking, so every call is pushed onto a worker thread
    and bounded by ``stripe_timeout``.
    """

    def __init__(self, settings: PaywallSettings):
        self.settings = settings
        self.currency = settings.currency
        self.timeout = settings.stripe_timeout
        self.webhook_tolerance = settings.webhook_tolerance

        stripe.api_key = settings.stripe_secret_key
        stripe.api_version = settings.stripe_api_version
        stripe.max_network_retries = settings.stripe_max_retries

    async def _call(self, operation: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a Stripe SDK call off the event loop and normalise its errors."""
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(partial(func, *args, **kwargs)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("Stripe %s timed out after %ss", operation, self.timeout)
            raise ProcessorError(f"Stripe {operation} timed out") from exc
        except stripe.InvalidRequestError as exc:
            if getattr(exc, "code", None) == "resource_missing":
                raise NotFoundError(f"Stripe object not found during {operation}") from exc
            logger.error("Stripe %s rejected: %s", operation, exc)
            raise ProcessorError(f"Stripe {operation} failed") from exc
        except stripe.StripeError as exc:
            logger.error("Stripe %s failed: %s", operation, exc)
            raise ProcessorError(f"Stripe {operation} failed") from exc

        logger.debug(
            "Stripe %s completed in %.2fms",
            operation,
            (time.perf_counter() - start) * 1000,
        )
        return result

    async def create_payment_intent(
        self,
        amount: int,
        currency: Optional[str] = None,
        customer_id: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None,
    ) -> PaymentIntent:
        params: dict[str, Any] = {
            "amount": validate_amount(amount),
            "currency": (currency or self.currency).lower(),
            "metadata": metadata or {},
            "automatic_payment_methods": {"enabled": True},
        }
        if customer_id:
            params["customer"] = customer_id

        obj = await self._call("payment_intent.create", stripe.PaymentIntent.create, **params)
        return _payment_intent_from_stripe(obj)

    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        obj = await self._call(
            "payment_intent.retrieve", stripe.PaymentIntent.retrieve, payment_intent_id
        )
        return _payment_intent_from_stripe(obj)

    async def find_customer_by_email(self, email: str) -> Optional[Customer]:
        result = await self._call("customer.list", stripe.Customer.list, email=email, limit=1)
        data = _as_dict(result).get("data") or []
        if not data:
            return None
        return _customer_from_stripe(data[0])

    async def create_customer(self, email: Optional[str] = None) -> Customer:
        params = {"email": email} if email else {}
        obj = await self._call("customer.create", stripe.Customer.create, **params)
        return _customer_from_stripe(obj)

    async def retrieve_customer(self, customer_id: str) -> Customer:
        obj = await self._call("customer.retrieve", stripe.Customer.retrieve, customer_id)
        customer = _customer_from_stripe(obj)
        if customer.deleted:
            raise NotFoundError("Customer has been deleted")
        return customer

    async def update_customer_metadata(
        self, customer_id: str, patch: dict[str, str]
    ) -> Customer:
        # Stripe merges metadata: named keys are replaced, others kept.
        obj = await self._call(
            "customer.modify", stripe.Customer.modify, customer_id, metadata=dict(patch)
        )
        return _customer_from_stripe(obj)
