"""Session cookie helpers and authentication dependencies."""

import logging

from fastapi import HTTPException, Request, Response

from paywall_engine.common.config import PaywallSettings, get_settings
from paywall_engine.common.exceptions import UnauthenticatedError

logger = logging.getLogger(__name__)


def set_session_cookie(response: Response, token: str, settings: PaywallSettings) -> None:
    """Attach the session token as an httpOnly, same-site cookie."""
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response, settings: PaywallSettings) -> None:
    response.delete_cookie(
        settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def read_session_token(request: Request) -> str:
    return request.cookies.get(get_settings().session_cookie_name, "")


async def require_session(request: Request):
    """FastAPI dependency for privileged routes.

    Re-verifies the session against the processor on every request and
    returns the VerifiedSession.
    """
    from paywall_engine.deps import get_verifier

    try:
        return await get_verifier().verify(read_session_token(request))
    except UnauthenticatedError as e:
        logger.info("Session rejected: %s", e.reason)
        raise HTTPException(status_code=401, detail="Not authenticated")
