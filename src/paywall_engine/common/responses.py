"""JSON response helpers shared by the routers."""

from typing import Any, Optional

from fastapi.responses import JSONResponse

from paywall_engine.common.exceptions import PaywallError


def error_response(
    message: str,
    status_code: int = 400,
    code: Optional[str] = None,
    **extra: Any,
) -> JSONResponse:
    """Build an ``{"error": ...}`` response."""
    body: dict[str, Any] = {"error": message}
    if code:
        body["code"] = code
    body.update(extra)
    return JSONResponse(body, status_code=status_code)


def error_from_exception(exc: PaywallError, status_code: int, **extra: Any) -> JSONResponse:
    return error_response(exc.message, status_code, code=exc.code, **extra)
