"""
Module: relay.py
Description: Connects the payload builder to the delivery queue.
"""

from typing import Optional

from sheethook.delivery.queue import DeliveryQueue
from sheethook.ingest.builder import PayloadBuilder
from sheethook.models.notification import ChangeNotification
from sheethook.models.payload import Payload
from sheethook.utils.logger import get_logger

logger = get_logger(__name__)


class WebhookRelay:
    """Builds a payload for each notification and enqueues it."""

    def __init__(self, builder: PayloadBuilder, queue: DeliveryQueue):
        self.builder = builder
        self.queue = queue

    def submit(self, notification: ChangeNotification) -> Optional[Payload]:
        """
        Handle one change notification.

        Returns:
            The enqueued payload, or None if the notification was discarded
        """
        reason = self.builder.discard_reason(notification)
        if reason is not None:
            logger.debug(
                "Notification discarded",
                kind=notification.kind.value,
                row=notification.row,
                column=notification.column,
                sheet_name=notification.sheet_name,
                reason=reason
            )
            return None

        payload = self.builder.build(notification)
        self.queue.enqueue(payload)
        return payload
