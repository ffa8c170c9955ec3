"""
Module: push.py
Description: Signed push delivery of payloads to the webhook endpoint.

Implements HTTP push delivery with a per-attempt timeout, signature
header and bounded retry. Attempt N that fails waits base_delay * N
before attempt N + 1; after max_attempts failures the payload is
reported as exhausted and dropped.

Key Components:
- WebhookDeliveryClient: runs the full attempt sequence for one payload
- DeliveryOutcome: terminal result handed back to the queue

Dependencies: httpx, tenacity, asyncio
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from sheethook.delivery.encoding import encode
from sheethook.delivery.observer import DeliveryObserver, LoggingObserver
from sheethook.delivery.signing import SIGNATURE_HEADER, ensure_secret, sign
from sheethook.errors import (
    ConfigurationError,
    DeliveryAttemptError,
    DeliveryExhausted,
    EndpointRejection,
    TransportError,
)
from sheethook.models.payload import Payload
from sheethook.utils.logger import get_logger

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]

# Error bodies are truncated before they are carried in exceptions
MAX_ERROR_BODY = 500


@dataclass(frozen=True)
class DeliveryOutcome:
    """Terminal result of delivering one payload."""

    delivered: bool
    attempts: int
    status_code: Optional[int] = None
    response_body: Optional[str] = None
    error: Optional[str] = None


class WebhookDeliveryClient:
    """
    HTTP client for pushing signed payloads to the endpoint.

    Each call to deliver() runs to a terminal outcome; transport errors
    and non-200 responses are retried, anything else propagates.
    """

    def __init__(
        self,
        webhook_url: str,
        secret: str,
        *,
        max_attempts: int = 3,
        base_delay_seconds: float = 1.0,
        timeout_seconds: float = 5.0,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Sleep = asyncio.sleep,
        observer: Optional[DeliveryObserver] = None
    ):
        """
        Initialize push delivery client.

        Args:
            webhook_url: Endpoint receiving the payloads
            secret: Shared signing secret
            max_attempts: Attempts per payload, at least 1
            base_delay_seconds: Delay unit between attempts
            timeout_seconds: HTTP timeout for each attempt
            http_client: Client to send requests with (created lazily if omitted)
            sleep: Async sleep primitive used between attempts
            observer: Receives success and failure observations

        Raises:
            ConfigurationError: If webhook_url or secret is invalid
            ValueError: If max_attempts or base_delay_seconds is out of range
        """
        if not webhook_url or not isinstance(webhook_url, str):
            raise ConfigurationError("webhook_url must be a non-empty string")
        if not webhook_url.startswith(('http://', 'https://')):
            raise ConfigurationError("webhook_url must be a valid HTTP/HTTPS URL")
        ensure_secret(secret)
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if base_delay_seconds < 0:
            raise ValueError("base_delay_seconds must not be negative")

        self.webhook_url = webhook_url
        self.max_attempts = max_attempts
        self.base_delay_seconds = base_delay_seconds
        self.timeout = httpx.Timeout(timeout_seconds, connect=timeout_seconds)
        self.observer = observer or LoggingObserver()
        self._secret = secret
        self._sleep = sleep
        self._client = http_client
        self._owns_client = http_client is None

        logger.info(
            "Push delivery client initialized",
            webhook_url=webhook_url,
            max_attempts=max_attempts,
            base_delay_seconds=base_delay_seconds,
            timeout_seconds=timeout_seconds
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def _post_once(self, payload: Payload, body: bytes, signature: str, attempt: int) -> httpx.Response:
        """
        Make a single delivery attempt.

        Raises:
            TransportError: If no response was received
            EndpointRejection: If the endpoint answered with anything but 200
        """
        logger.debug(
            "Attempting payload delivery",
            row_number=payload.row_number,
            attempt=attempt,
            webhook_url=self.webhook_url
        )

        try:
            response = await self._get_client().post(
                self.webhook_url,
                content=body,
                headers={
                    'Content-Type': 'application/json',
                    SIGNATURE_HEADER: signature
                },
                timeout=self.timeout
            )
        except httpx.TimeoutException as e:
            logger.warning(
                "Payload delivery timeout",
                row_number=payload.row_number,
                attempt=attempt,
                webhook_url=self.webhook_url
            )
            raise TransportError(f"Timeout: {e}", cause=e) from e
        except httpx.RequestError as e:
            logger.warning(
                "Payload delivery network error",
                row_number=payload.row_number,
                attempt=attempt,
                error=str(e),
                error_type=type(e).__name__
            )
            raise TransportError(f"{type(e).__name__}: {e}", cause=e) from e

        if response.status_code != 200:
            error_body = response.text[:MAX_ERROR_BODY]
            logger.warning(
                "Payload delivery HTTP error",
                row_number=payload.row_number,
                attempt=attempt,
                status_code=response.status_code,
                response=error_body
            )
            raise EndpointRejection(response.status_code, error_body)

        return response

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.info(
            "Retrying payload delivery",
            attempt=retry_state.attempt_number,
            max_attempts=self.max_attempts,
            delay_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
            error=str(error)
        )

    def _notify(self, callback: str, payload: Payload, *args: Any) -> None:
        # The outcome is already decided; a failing sink must not change it
        try:
            getattr(self.observer, callback)(payload, *args)
        except Exception as e:
            logger.exception(
                "Delivery observer failed",
                callback=callback,
                row_number=payload.row_number,
                error=str(e)
            )

    async def deliver(self, payload: Payload) -> DeliveryOutcome:
        """
        Deliver a payload, retrying until success or attempt exhaustion.

        The body and its signature are computed once from the same
        canonical bytes and reused by every attempt.

        Args:
            payload: Payload to deliver

        Returns:
            DeliveryOutcome; delivered is False once attempts are exhausted
        """
        if not isinstance(payload, Payload):
            raise ValueError("payload must be a Payload instance")

        body = encode(payload)
        signature = sign(body, self._secret)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.base_delay_seconds, increment=self.base_delay_seconds),
            retry=retry_if_exception_type(DeliveryAttemptError),
            before_sleep=self._log_retry,
            sleep=self._sleep
        )

        attempts = 0
        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    response = await self._post_once(payload, body, signature, attempts)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            attempts = e.last_attempt.attempt_number
            exhausted = DeliveryExhausted(attempts, last_error)
            self._notify("on_failure", payload, attempts, exhausted)
            return DeliveryOutcome(
                delivered=False,
                attempts=attempts,
                status_code=getattr(last_error, "status_code", None),
                response_body=getattr(last_error, "body", None),
                error=str(exhausted)
            )

        self._notify("on_success", payload, attempts, response.status_code, response.text)
        return DeliveryOutcome(
            delivered=True,
            attempts=attempts,
            status_code=response.status_code,
            response_body=response.text
        )

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
