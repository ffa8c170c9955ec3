"""
Module: queue.py
Description: Sequential in-memory delivery queue.

Payloads are delivered strictly in arrival order, one at a time. A
single drain task pops the head payload, runs its whole attempt
sequence, pauses for the pacing interval and moves on. enqueue() only
starts a drain when none is running, so at most one delivery is ever
in flight.

The queue lives in memory and is unbounded: a slow or unreachable
endpoint grows it without limit, and anything still queued is lost
when the process stops.

Key Components:
- DeliveryQueue: FIFO queue with a single drain task
- QueueStats: delivered/failed counters

Dependencies: asyncio, collections
"""

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, Deque, Optional

from sheethook.delivery.observer import DeliveryObserver
from sheethook.delivery.push import DeliveryOutcome
from sheethook.errors import DeliveryExhausted
from sheethook.models.payload import Payload
from sheethook.utils.logger import get_logger

logger = get_logger(__name__)

Deliver = Callable[[Payload], Awaitable[DeliveryOutcome]]
Sleep = Callable[[float], Awaitable[None]]


@dataclass
class QueueStats:
    """Counters of terminal outcomes since the queue was created."""

    delivered: int = 0
    failed: int = 0


class DeliveryQueue:
    """
    FIFO delivery queue drained by a single asyncio task.

    All methods must be called from the event loop that runs the drain.
    State is only touched between awaits, which is what keeps a second
    drain from starting.
    """

    def __init__(
        self,
        deliver: Deliver,
        *,
        pacing_interval_seconds: float = 5.0,
        sleep: Sleep = asyncio.sleep,
        observer: Optional[DeliveryObserver] = None
    ):
        """
        Initialize the queue.

        Args:
            deliver: Runs the full delivery of one payload (usually
                WebhookDeliveryClient.deliver)
            pacing_interval_seconds: Pause after each payload's delivery
            sleep: Async sleep primitive used for the pacing pause
            observer: Notified of a failure when deliver raises instead
                of returning an outcome
        """
        if pacing_interval_seconds < 0:
            raise ValueError("pacing_interval_seconds must not be negative")

        self._deliver = deliver
        self._pacing_interval = pacing_interval_seconds
        self._sleep = sleep
        self._observer = observer
        self._pending: Deque[Payload] = deque()
        self._draining = False
        self._drain_task: Optional[asyncio.Task] = None
        self._idle = asyncio.Event()
        self._idle.set()
        self._closed = False
        self.stats = QueueStats()

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def pending_count(self) -> int:
        """Payloads waiting to be dequeued."""
        return len(self._pending)

    def is_idle(self) -> bool:
        """True when no drain is running."""
        return not self._draining

    def enqueue(self, payload: Payload) -> None:
        """
        Append a payload and make sure a drain is running.

        Never blocks and never rejects a payload while the queue is open.

        Raises:
            RuntimeError: If the queue has been closed
        """
        if self._closed:
            raise RuntimeError("delivery queue is closed")

        self._pending.append(payload)
        logger.info(
            "Payload enqueued",
            row_number=payload.row_number,
            change_type=payload.change_type.value,
            pending=len(self._pending)
        )

        if not self._draining:
            self._draining = True
            self._idle.clear()
            self._drain_task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        logger.debug("Drain started", pending=len(self._pending))
        try:
            while self._pending:
                payload = self._pending.popleft()
                outcome = await self._deliver_one(payload)
                if outcome.delivered:
                    self.stats.delivered += 1
                else:
                    self.stats.failed += 1
                if not self._closed:
                    await self._sleep(self._pacing_interval)
        finally:
            self._draining = False
            self._idle.set()
            logger.debug("Drain finished", delivered=self.stats.delivered, failed=self.stats.failed)

    async def _deliver_one(self, payload: Payload) -> DeliveryOutcome:
        """Run one delivery; unexpected errors count as exhausted."""
        try:
            return await self._deliver(payload)
        except Exception as e:
            logger.exception(
                "Unhandled error during payload delivery",
                row_number=payload.row_number,
                change_type=payload.change_type.value,
                error=str(e),
                error_type=type(e).__name__
            )
            exhausted = DeliveryExhausted(0, e)
            if self._observer is not None:
                try:
                    self._observer.on_failure(payload, 0, exhausted)
                except Exception:
                    logger.exception("Delivery observer failed", row_number=payload.row_number)
            return DeliveryOutcome(delivered=False, attempts=0, error=str(exhausted))

    async def wait_until_idle(self) -> None:
        """Wait until the queue is empty and no delivery is running."""
        await self._idle.wait()

    async def close(self) -> None:
        """
        Stop accepting payloads and drop those still queued.

        The delivery already in flight is awaited, not cancelled.
        """
        self._closed = True
        dropped = len(self._pending)
        self._pending.clear()
        if dropped:
            logger.warning("Dropping undelivered payloads on shutdown", dropped=dropped)
        if self._drain_task is not None and not self._drain_task.done():
            await self._drain_task
