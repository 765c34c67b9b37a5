"""Fire-and-forget notifications to note collaborators.

Services hand events to the dispatcher, which queues them and returns at
once. A background worker publishes each event to the recipients' Redis
channels. Nothing here ever raises into the caller.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Tuple
from uuid import UUID

from ...config import Settings, get_settings
from ..redis_client import RedisClient, get_redis_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoteNotification:
    """One message about one note, addressed to a set of users."""

    note_id: UUID
    message: str
    recipient_ids: Tuple[UUID, ...]
    kind: str = "note_updated"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def payload(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "noteId": str(self.note_id),
            "message": self.message,
            "createdAt": self.created_at.isoformat(),
        }


class NotificationDispatcher:
    """Queue-backed publisher of note notifications."""

    def __init__(
        self,
        redis_client: Optional[RedisClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.redis_client = redis_client or get_redis_client()
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def channel_for(self, user_id: UUID) -> str:
        return f"{self.settings.notification_channel_prefix}:user:{user_id}"

    def notify(
        self,
        note_id: UUID,
        message: str,
        recipients: Iterable[UUID],
        exclude_user_id: Optional[UUID] = None,
        kind: str = "note_updated",
    ) -> bool:
        """
        Queue a notification for everyone in recipients except exclude_user_id.

        Returns:
            bool: True if the event was queued, False if it was dropped
            (no recipients, dispatcher stopped or queue full).
        """
        # dedupe while keeping order
        targets = tuple(dict.fromkeys(r for r in recipients if r != exclude_user_id))
        if not targets:
            return False

        if not self.is_running:
            logger.warning(
                "Notification dispatcher not running, dropping event",
                extra={"note_id": str(note_id), "kind": kind},
            )
            return False

        event = NoteNotification(note_id=note_id, message=message, recipient_ids=targets, kind=kind)
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(
                "Notification queue full, dropping event",
                extra={"note_id": str(note_id), "kind": kind},
            )
            return False
        return True

    async def deliver(self, event: NoteNotification) -> int:
        """
        Publish one event to each recipient channel.

        Returns:
            int: number of channels that reached at least one subscriber.
            Offline users and a disconnected Redis both count as 0.
        """
        payload = event.payload()
        delivered = 0
        for user_id in event.recipient_ids:
            receivers = await self.redis_client.publish(self.channel_for(user_id), payload)
            if receivers:
                delivered += 1
        logger.debug(
            f"Published {event.kind} for note {event.note_id}: "
            f"{delivered} of {len(event.recipient_ids)} channel(s) had subscribers"
        )
        return delivered

    async def start(self) -> None:
        """Start the background worker on the running loop."""
        if self.is_running:
            return
        self._queue = asyncio.Queue(maxsize=self.settings.notification_queue_size)
        self._worker = asyncio.create_task(self._run(), name="notification-dispatcher")
        logger.info("Notification dispatcher started")

    async def stop(self, timeout: float = 5.0) -> None:
        """Flush pending events (bounded by timeout) and stop the worker."""
        if not self.is_running:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Dropping {self._queue.qsize()} undelivered notification(s) on shutdown")
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        self._queue = None
        logger.info("Notification dispatcher stopped")

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self.deliver(event)
            except Exception:
                logger.exception(
                    "Failed to deliver notification",
                    extra={"note_id": str(event.note_id), "kind": event.kind},
                )
            finally:
                self._queue.task_done()


# Singleton instance
_dispatcher: Optional[NotificationDispatcher] = None


def get_notification_dispatcher() -> NotificationDispatcher:
    """Get notification dispatcher singleton."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher
