"""
Module: notifications.py
Description: Change notification and queue status handlers.

Implements the inbound surface of the relay:
- POST /notifications: accept a change notification from the sheet trigger
- GET /queue: report delivery queue state

Key Components:
- submit_notification(): builds and enqueues a payload
- get_queue_status(): queue depth and outcome counters
- get_relay() / get_queue(): dependencies resolved from app state

Dependencies: FastAPI, models, ingest, delivery
"""

from fastapi import APIRouter, Depends, Request, Response
from fastapi import status as status_codes

from sheethook.delivery.queue import DeliveryQueue
from sheethook.ingest.relay import WebhookRelay
from sheethook.models.notification import ChangeNotification
from sheethook.models.response import NotificationResponse, QueueStatusResponse
from sheethook.utils.logger import get_logger

router = APIRouter(tags=["notifications"])
logger = get_logger(__name__)


def get_relay(request: Request) -> WebhookRelay:
    """Dependency returning the relay created at startup."""
    return request.app.state.relay


def get_queue(request: Request) -> DeliveryQueue:
    """Dependency returning the delivery queue created at startup."""
    return request.app.state.delivery_queue


@router.post(
    "/notifications",
    response_model=NotificationResponse,
    status_code=status_codes.HTTP_202_ACCEPTED
)
async def submit_notification(
    notification: ChangeNotification,
    response: Response,
    relay: WebhookRelay = Depends(get_relay)
) -> NotificationResponse:
    """
    Accept a change notification.

    Responds 202 when a payload was enqueued and 200 with a reason when
    the notification was filtered out. Delivery happens in the
    background; the response never waits for it.
    """
    payload = relay.submit(notification)
    if payload is None:
        response.status_code = status_codes.HTTP_200_OK
        return NotificationResponse(
            accepted=False,
            pending=relay.queue.pending_count,
            reason=relay.builder.discard_reason(notification)
        )

    logger.info(
        "Notification accepted",
        kind=notification.kind.value,
        row_number=payload.row_number,
        sheet_name=notification.sheet_name
    )

    return NotificationResponse(
        accepted=True,
        change_type=payload.change_type.value,
        row_number=payload.row_number,
        pending=relay.queue.pending_count
    )


@router.get("/queue", response_model=QueueStatusResponse)
async def get_queue_status(queue: DeliveryQueue = Depends(get_queue)) -> QueueStatusResponse:
    """Report whether a drain is running and how many payloads wait."""
    return QueueStatusResponse(
        idle=queue.is_idle(),
        pending=queue.pending_count,
        delivered=queue.stats.delivered,
        failed=queue.stats.failed
    )
