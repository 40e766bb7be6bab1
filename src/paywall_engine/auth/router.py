"""Login, logout and session-check endpoints."""

import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from paywall_engine.auth.schemas import LoginRequest, LoginResponse, LogoutResponse, SessionStatus
from paywall_engine.common.config import get_settings
from paywall_engine.common.exceptions import (
    AuthError,
    ProcessorError,
    UnauthenticatedError,
    ValidationError,
)
from paywall_engine.common.responses import error_from_exception, error_response
from paywall_engine.common.security import (
    clear_session_cookie,
    read_session_token,
    set_session_cookie,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _get_authenticator():
    from paywall_engine.deps import get_authenticator
    return get_authenticator()


def _get_verifier():
    from paywall_engine.deps import get_verifier
    return get_verifier()


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, response: Response):
    try:
        result = await _get_authenticator().login(body.email or "", body.access_code or "")
    except ValidationError as e:
        return error_from_exception(e, 400)
    except AuthError as e:
        return error_from_exception(e, 401)
    except ProcessorError:
        logger.exception("Error during login")
        return error_response("Login failed", 500, code="PROCESSOR_ERROR")

    set_session_cookie(response, result.token, get_settings())
    return LoginResponse(customer_id=result.customer_id)


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response):
    clear_session_cookie(response, get_settings())
    return LogoutResponse()


@router.get("/verify-session", response_model=SessionStatus)
async def verify_session(request: Request):
    try:
        session = await _get_verifier().verify(read_session_token(request))
    except UnauthenticatedError as e:
        logger.debug("Session check failed: %s", e.reason)
        return JSONResponse({"authenticated": False}, status_code=401)

    return SessionStatus(
        authenticated=True,
        email=session.email,
        customer_id=session.customer_id,
    )
