"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains all data models used by the webhook relay:
- Payload: normalized change description that gets delivered
- ChangeNotification: inbound notification from the sheet trigger
- NotificationResponse / QueueStatusResponse: API response models

All models are exported here for convenient importing.
"""

from .notification import ChangeNotification
from .payload import ChangeType, Payload
from .response import NotificationResponse, QueueStatusResponse

__all__ = [
    "ChangeNotification",
    "ChangeType",
    "Payload",
    "NotificationResponse",
    "QueueStatusResponse",
]
