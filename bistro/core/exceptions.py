"""
Application Exceptions

Errors raised by handlers and dependencies. Each carries the HTTP status
the global exception handlers in bistro.main respond with.
"""


class BistroError(Exception):
    """Base class for errors with a known HTTP mapping."""

    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.error)
        self.message = message or self.error


class UnauthorizedError(BistroError):
    """Missing, malformed, invalid or expired bearer token."""

    status_code = 401
    error = "unauthorized access"


class ForbiddenError(BistroError):
    """Authenticated, but not allowed to perform the operation."""

    status_code = 403
    error = "forbidden access"


class PaymentServiceError(BistroError):
    """The payment processor rejected or failed a request."""

    status_code = 502
    error = "Payment Service Error"

    def __init__(self, message: str = "", error_code: str = ""):
        super().__init__(message)
        self.error_code = error_code
