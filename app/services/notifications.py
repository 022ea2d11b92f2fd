"""Notification collaborator: protocol + in-process notification center.

The center keeps pending alarms as `loop.call_later` handles on the running
asyncio loop. Delivered alarms are recorded and, when a webhook URL is
configured, POSTed as JSON so a phone push relay can pick them up.
"""

import asyncio
import logging
import os
import uuid
from collections import deque
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, Protocol

import httpx

from app.models.reminder import Notification

logger = logging.getLogger(__name__)

NOTIFICATIONS_ENABLED = os.getenv("NOTIFICATIONS_ENABLED", "true").lower() == "true"
NOTIFICATION_WEBHOOK_URL = os.getenv("NOTIFICATION_WEBHOOK_URL", "")
NOTIFICATION_WEBHOOK_TIMEOUT = float(os.getenv("NOTIFICATION_WEBHOOK_TIMEOUT", "10"))
DELIVERED_HISTORY_SIZE = int(os.getenv("DELIVERED_HISTORY_SIZE", "50"))


class NotificationBackend(Protocol):
    """What the reminder scheduler needs from the platform.

    Implementations are not required to deduplicate: the scheduler always
    cancels before it schedules.
    """

    async def request_permissions(self) -> bool: ...

    async def schedule_one_shot(
        self, delay_seconds: float, title: str, body: str, data: dict[str, Any]
    ) -> str: ...

    async def cancel_all(self) -> None: ...

    async def present_immediate(
        self, identifier: str, title: str, body: str, sticky: bool = True, silent: bool = True
    ) -> None: ...

    async def dismiss(self, identifier: str) -> None: ...


class LocalNotificationCenter:
    """NotificationBackend running on the current event loop."""

    def __init__(
        self,
        enabled: bool = NOTIFICATIONS_ENABLED,
        webhook_url: str = NOTIFICATION_WEBHOOK_URL,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.enabled = enabled
        self.webhook_url = webhook_url
        self._clock = clock
        self._handles: dict[str, asyncio.TimerHandle] = {}
        self._webhook_tasks: set[asyncio.Task] = set()
        self.pending: dict[str, Notification] = {}
        self.presented: dict[str, Notification] = {}
        # Most recent deliveries only
        self.delivered: deque[Notification] = deque(maxlen=DELIVERED_HISTORY_SIZE)

    async def request_permissions(self) -> bool:
        if not self.enabled:
            logger.warning("Notification permissions not granted")
        return self.enabled

    async def schedule_one_shot(
        self, delay_seconds: float, title: str, body: str, data: dict[str, Any]
    ) -> str:
        notification = Notification(
            id=uuid.uuid4().hex,
            title=title,
            body=body,
            data=data,
            fire_at=self._clock() + timedelta(seconds=delay_seconds),
        )
        loop = asyncio.get_running_loop()
        self._handles[notification.id] = loop.call_later(
            delay_seconds, self._deliver, notification.id
        )
        self.pending[notification.id] = notification
        logger.info("Alarm %s scheduled in %.0fs", notification.id, delay_seconds)
        return notification.id

    async def cancel_all(self) -> None:
        for handle in self._handles.values():
            handle.cancel()
        if self._handles:
            logger.info("Cancelled %d scheduled alarm(s)", len(self._handles))
        self._handles.clear()
        self.pending.clear()

    async def present_immediate(
        self, identifier: str, title: str, body: str, sticky: bool = True, silent: bool = True
    ) -> None:
        self.presented[identifier] = Notification(
            id=identifier, title=title, body=body, sticky=sticky, silent=silent,
            delivered_at=self._clock(),
        )

    async def dismiss(self, identifier: str) -> None:
        self.presented.pop(identifier, None)

    async def close(self) -> None:
        """Cancel timers and wait for in-flight webhook posts."""
        await self.cancel_all()
        if self._webhook_tasks:
            await asyncio.gather(*self._webhook_tasks, return_exceptions=True)

    def _deliver(self, notification_id: str) -> None:
        self._handles.pop(notification_id, None)
        notification = self.pending.pop(notification_id, None)
        if notification is None:
            return
        delivered = notification.model_copy(update={"delivered_at": self._clock()})
        self.delivered.append(delivered)
        logger.info("Alarm delivered: %s: %s", delivered.title, delivered.body)

        if self.webhook_url:
            task = asyncio.get_running_loop().create_task(self._post_webhook(delivered))
            self._webhook_tasks.add(task)
            task.add_done_callback(self._webhook_tasks.discard)

    async def _post_webhook(self, notification: Notification) -> None:
        try:
            async with httpx.AsyncClient(timeout=NOTIFICATION_WEBHOOK_TIMEOUT) as client:
                resp = await client.post(
                    self.webhook_url, json=notification.model_dump(mode="json")
                )
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Notification webhook failed: %s", e)

