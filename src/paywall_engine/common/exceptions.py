"""Paywall-Engine exception hierarchy."""


class PaywallError(Exception):
    """Base exception for all Paywall errors."""

    def __init__(self, message: str = "", code: str = "PAYWALL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(PaywallError):
    """Raised when request input is missing or malformed."""

    def __init__(self, message: str = "Invalid request"):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(PaywallError):
    """Raised when a customer, payment intent or access code cannot be found."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class AuthError(PaywallError):
    """Raised when a credential check fails.

    ``reason`` names the check that failed for server-side logs only;
    ``message`` is what the caller sees and never reveals the reason.
    """

    def __init__(
        self,
        message: str = "Invalid email or access code",
        reason: str = "",
        code: str = "AUTH_FAILED",
    ):
        self.reason = reason
        super().__init__(message, code=code)


class PaymentIncompleteError(AuthError):
    """Raised when the payment intent on record has not succeeded."""

    def __init__(self, message: str = "Payment not completed", status: str = ""):
        self.status = status
        super().__init__(message, reason="payment_incomplete", code="PAYMENT_INCOMPLETE")


class UnauthenticatedError(AuthError):
    """Raised when a session token fails verification."""

    def __init__(self, message: str = "Not authenticated", reason: str = ""):
        super().__init__(message, reason=reason, code="UNAUTHENTICATED")


class ProcessorError(PaywallError):
    """Raised when the payment processor fails (transport, auth, upstream 5xx)."""

    def __init__(self, message: str = "Payment processor error"):
        super().__init__(message, code="PROCESSOR_ERROR")


class SignatureInvalidError(PaywallError):
    """Raised when a webhook signature is missing or does not verify."""

    def __init__(self, message: str = "Invalid webhook signature"):
        super().__init__(message, code="SIGNATURE_INVALID")


class AccessCodeStillProcessingError(PaywallError):
    """Raised when polling for an access code exhausts its attempts."""

    def __init__(
        self,
        message: str = "Your payment is still being processed. Please try again in a few minutes.",
    ):
        super().__init__(message, code="STILL_PROCESSING")
