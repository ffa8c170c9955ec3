"""
Module: observer.py
Description: Delivery observation sink.

The delivery client reports one observation per payload: a success
once the endpoint accepts it, or a failure once attempts run out.
LoggingObserver writes both as structured log events.
"""

from typing import Protocol

from sheethook.errors import DeliveryExhausted
from sheethook.models.payload import Payload
from sheethook.utils.logger import get_logger

logger = get_logger(__name__)

# Response bodies are logged truncated
MAX_LOGGED_BODY = 500


class DeliveryObserver(Protocol):
    """Receives the terminal outcome of each payload delivery."""

    def on_success(
        self,
        payload: Payload,
        attempts: int,
        status_code: int,
        response_body: str
    ) -> None:
        ...

    def on_failure(self, payload: Payload, attempts: int, error: DeliveryExhausted) -> None:
        ...


class LoggingObserver:
    """Observer that records outcomes through structlog."""

    def on_success(
        self,
        payload: Payload,
        attempts: int,
        status_code: int,
        response_body: str
    ) -> None:
        logger.info(
            "Payload delivered",
            row_number=payload.row_number,
            change_type=payload.change_type.value,
            timestamp=payload.timestamp,
            attempts=attempts,
            status_code=status_code,
            response=response_body[:MAX_LOGGED_BODY]
        )

    def on_failure(self, payload: Payload, attempts: int, error: DeliveryExhausted) -> None:
        last_error = error.last_error
        logger.error(
            "Payload delivery exhausted",
            row_number=payload.row_number,
            change_type=payload.change_type.value,
            timestamp=payload.timestamp,
            attempts=attempts,
            error=str(last_error) if last_error is not None else str(error),
            error_type=type(last_error).__name__ if last_error is not None else None,
            status_code=getattr(last_error, "status_code", None)
        )
