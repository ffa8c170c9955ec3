"""
Module: errors.py
Description: Exception types for the webhook relay.

ConfigurationError is fatal at startup. TransportError and
EndpointRejection describe a single failed delivery attempt and are
retried by the delivery client. DeliveryExhausted is the terminal
failure reported once all attempts for a payload are used up.
"""

from typing import Optional


class ConfigurationError(Exception):
    """Raised when the endpoint or signing secret is missing or invalid."""


class DeliveryAttemptError(Exception):
    """Base class for retryable per-attempt delivery failures."""


class TransportError(DeliveryAttemptError):
    """
    Raised when an attempt fails before an HTTP response is received.

    Attributes:
        cause: Underlying httpx exception
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class EndpointRejection(DeliveryAttemptError):
    """
    Raised when the endpoint answers with any status other than 200.

    Attributes:
        status_code: HTTP status returned by the endpoint
        body: Response body (truncated), empty when unreadable
    """

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        message = f"Endpoint returned HTTP {status_code}"
        if body:
            message = f"{message}: {body}"
        super().__init__(message)


class DeliveryExhausted(Exception):
    """
    Terminal failure for one payload after every attempt failed.

    Attributes:
        attempts: Number of attempts made
        last_error: Error raised by the final attempt
    """

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        self.attempts = attempts
        self.last_error = last_error
        detail = str(last_error) if last_error is not None else "unknown error"
        super().__init__(f"Delivery failed after {attempts} attempt(s): {detail}")
