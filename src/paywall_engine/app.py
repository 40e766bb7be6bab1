"""FastAPI application factory for Paywall-Engine."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from paywall_engine.common.config import get_settings
from paywall_engine.common.logging import setup_logging
from paywall_engine.common.schemas import HealthResponse


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(version=settings.api_version)

    # Mount routers
    from paywall_engine.checkout.router import router as checkout_router
    from paywall_engine.entitlements.router import router as webhook_router
    from paywall_engine.auth.router import router as auth_router

    prefix = settings.api_prefix
    app.include_router(checkout_router, prefix=prefix)
    app.include_router(webhook_router, prefix=prefix)
    app.include_router(auth_router, prefix=prefix)

    return app
