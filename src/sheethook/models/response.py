"""
Module: response.py
Description: API response models for the webhook relay.

Key Components:
- NotificationResponse: result of POST /notifications
- QueueStatusResponse: result of GET /queue
"""

from typing import Optional

from pydantic import BaseModel, Field


class NotificationResponse(BaseModel):
    """
    Response model for a submitted change notification.

    Attributes:
        accepted: Whether a payload was built and enqueued
        change_type: Change type of the enqueued payload
        row_number: Row of the enqueued payload
        pending: Queue depth right after enqueueing
        reason: Why the notification was discarded (when not accepted)
    """

    accepted: bool = Field(..., description="Whether a payload was enqueued")
    change_type: Optional[str] = Field(default=None, description="Change type of the payload")
    row_number: Optional[int] = Field(default=None, description="Row of the payload")
    pending: int = Field(default=0, ge=0, description="Payloads waiting in the queue")
    reason: Optional[str] = Field(default=None, description="Discard reason")


class QueueStatusResponse(BaseModel):
    """Snapshot of the delivery queue."""

    idle: bool = Field(..., description="True when no drain is running")
    pending: int = Field(..., ge=0, description="Payloads waiting in the queue")
    delivered: int = Field(..., ge=0, description="Payloads delivered since start")
    failed: int = Field(..., ge=0, description="Payloads dropped after exhausting attempts")
