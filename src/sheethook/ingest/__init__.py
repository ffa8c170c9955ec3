"""
Package: ingest
Description: Turns sheet change notifications into payloads and hands
them to the delivery queue.
"""

from .builder import PayloadBuilder
from .relay import WebhookRelay

__all__ = ["PayloadBuilder", "WebhookRelay"]
