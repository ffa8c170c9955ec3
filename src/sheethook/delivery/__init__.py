"""
Package: delivery
Description: Payload delivery for the webhook relay.

Provides the canonical encoder, HMAC signing, the retrying push
client and the sequential delivery queue.
"""

from .encoding import decode, encode
from .observer import DeliveryObserver, LoggingObserver
from .push import DeliveryOutcome, WebhookDeliveryClient
from .queue import DeliveryQueue
from .signing import SIGNATURE_HEADER, sign, verify

__all__ = [
    "decode",
    "encode",
    "sign",
    "verify",
    "SIGNATURE_HEADER",
    "DeliveryObserver",
    "LoggingObserver",
    "DeliveryOutcome",
    "WebhookDeliveryClient",
    "DeliveryQueue",
]
