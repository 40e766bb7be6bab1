"""Paywall-Engine configuration via pydantic-settings."""

import warnings
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_SECRET_KEY = "insecure-dev-key-change-me"


class PaywallSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PAYWALL_")

    environment: str = "development"
    secret_key: str = _INSECURE_SECRET_KEY
    log_level: str = "INFO"

    # Stripe
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_api_version: str = "2023-08-16"
    stripe_timeout: int = 30  # seconds
    stripe_max_retries: int = 2
    currency: str = "cad"

    # Webhooks
    webhook_tolerance: int = 300  # seconds between signing and delivery
    webhook_dedupe: bool = False
    webhook_dedupe_ttl: int = 86400  # 24 hours
    webhook_dedupe_max: int = 10000

    # Sessions
    session_cookie_name: str = "session_token"
    session_max_age: int = 60 * 60 * 24 * 30  # 30 days

    # Access code polling (client-side contract)
    access_code_poll_attempts: int = 5
    access_code_poll_delay: float = 2.0

    # API
    api_title: str = "Paywall-Engine"
    api_version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = ""
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate_for_production(self) -> None:
        """Raise if insecure defaults or blank Stripe keys are used outside development."""
        problems = []
        if self.secret_key == _INSECURE_SECRET_KEY:
            problems.append("PAYWALL_SECRET_KEY")
        if not self.stripe_secret_key:
            problems.append("PAYWALL_STRIPE_SECRET_KEY")
        if not self.stripe_webhook_secret:
            problems.append("PAYWALL_STRIPE_WEBHOOK_SECRET")

        if self.environment != "development" and problems:
            raise RuntimeError(
                f"Insecure or missing configuration in '{self.environment}' environment. "
                f"Set these environment variables: {', '.join(problems)}. "
                "Generate secrets with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
            )

        if self.secret_key == _INSECURE_SECRET_KEY:
            warnings.warn(
                "Using insecure default secret key — set PAYWALL_SECRET_KEY for production",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> PaywallSettings:
    settings = PaywallSettings()
    settings.validate_for_production()
    return settings
