"""Dependency injection singletons for Paywall-Engine."""

from paywall_engine.auth.authenticator import Authenticator
from paywall_engine.auth.tokens import SessionTokenSerializer
from paywall_engine.auth.verifier import SessionVerifier
from paywall_engine.checkout.retriever import AccessCodeRetriever
from paywall_engine.common.config import get_settings
from paywall_engine.entitlements.dedupe import ProcessedEventCache
from paywall_engine.entitlements.issuer import EntitlementIssuer
from paywall_engine.gateway.base import ProcessorGateway

_gateway: ProcessorGateway | None = None
_event_cache: ProcessedEventCache | None = None
_issuer: EntitlementIssuer | None = None
_retriever: AccessCodeRetriever | None = None
_tokens: SessionTokenSerializer | None = None
_authenticator: Authenticator | None = None
_verifier: SessionVerifier | None = None


def get_gateway() -> ProcessorGateway:
    global _gateway
    if _gateway is None:
        from paywall_engine.gateway.stripe_gateway import StripeGateway
        _gateway = StripeGateway(get_settings())
    return _gateway


def set_gateway(gateway: ProcessorGateway) -> None:
    """Install a gateway (tests, alternative processors) and drop dependents."""
    global _gateway
    reset_singletons()
    _gateway = gateway


def get_event_cache() -> ProcessedEventCache | None:
    global _event_cache
    settings = get_settings()
    if not settings.webhook_dedupe:
        return None
    if _event_cache is None:
        _event_cache = ProcessedEventCache(
            ttl=settings.webhook_dedupe_ttl,
            max_size=settings.webhook_dedupe_max,
        )
    return _event_cache


def get_issuer() -> EntitlementIssuer:
    global _issuer
    if _issuer is None:
        _issuer = EntitlementIssuer(get_gateway(), event_cache=get_event_cache())
    return _issuer


def get_retriever() -> AccessCodeRetriever:
    global _retriever
    if _retriever is None:
        settings = get_settings()
        _retriever = AccessCodeRetriever(
            get_gateway(),
            attempts=settings.access_code_poll_attempts,
            delay=settings.access_code_poll_delay,
        )
    return _retriever


def get_session_tokens() -> SessionTokenSerializer:
    global _tokens
    if _tokens is None:
        settings = get_settings()
        _tokens = SessionTokenSerializer(settings.secret_key, max_age=settings.session_max_age)
    return _tokens


def get_authenticator() -> Authenticator:
    global _authenticator
    if _authenticator is None:
        _authenticator = Authenticator(get_gateway(), get_session_tokens())
    return _authenticator


def get_verifier() -> SessionVerifier:
    global _verifier
    if _verifier is None:
        _verifier = SessionVerifier(get_gateway(), get_session_tokens())
    return _verifier


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _gateway, _event_cache, _issuer, _retriever, _tokens, _authenticator, _verifier
    _gateway = None
    _event_cache = None
    _issuer = None
    _retriever = None
    _tokens = None
    _authenticator = None
    _verifier = None
