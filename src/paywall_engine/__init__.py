"""Paywall-Engine: one-time access codes issued from Stripe payments."""

from paywall_engine.client import PaywallClient
from paywall_engine.entitlements.codes import generate_access_code, normalize_access_code

__all__ = [
    "PaywallClient",
    "generate_access_code",
    "normalize_access_code",
]
__version__ = "0.1.0"
