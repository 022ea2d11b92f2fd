"""Reminder scheduling: one alarm plus a refreshed countdown notification.

Every `schedule()` call first tears down the previous alarm and countdown
loop, so at most one of each is live per scheduler.
"""

import asyncio
import logging
import os
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from app.models.feeding import FeedingType
from app.models.reminder import ReminderStatus
from app.services.calculations import format_countdown, format_time
from app.services.notifications import NotificationBackend

logger = logging.getLogger(__name__)

COUNTDOWN_REFRESH_SECONDS = float(os.getenv("COUNTDOWN_REFRESH_SECONDS", "60"))
COUNTDOWN_NOTIFICATION_ID = "feeding-countdown"

ALARM_TITLE = "Time to feed the baby 🍼"
COUNTDOWN_TITLE = "Next feeding"


def reminder_body(suggested_side: FeedingType) -> str:
    if suggested_side == "bottle":
        return "Time to prepare a bottle"
    return f"Suggested side: {suggested_side.capitalize()} breast"


class ReminderScheduler:
    def __init__(
        self,
        backend: NotificationBackend,
        clock: Callable[[], datetime] = datetime.now,
        refresh_seconds: float = COUNTDOWN_REFRESH_SECONDS,
    ) -> None:
        self._backend = backend
        self._clock = clock
        self._refresh_seconds = refresh_seconds
        self._countdown_task: Optional[asyncio.Task] = None
        self._target: Optional[datetime] = None
        self._side: Optional[FeedingType] = None
        self._alarm_id: Optional[str] = None
        self.permission_granted = True

    @property
    def target(self) -> Optional[datetime]:
        return self._target

    @property
    def countdown_running(self) -> bool:
        return self._countdown_task is not None and not self._countdown_task.done()

    async def request_permissions(self) -> bool:
        try:
            self.permission_granted = await self._backend.request_permissions()
        except Exception as e:
            logger.error("Error requesting notification permissions: %s", e)
            self.permission_granted = False
        return self.permission_granted

    async def schedule(self, target: datetime, suggested_side: FeedingType) -> Optional[str]:
        """Replace any pending reminder with one firing at `target`.

        Returns the alarm id, or None when nothing was scheduled (target
        already elapsed, permission denied or backend error).
        """
        await self.cancel_all()

        seconds_until = (target - self._clock()).total_seconds()
        if seconds_until <= 0:
            logger.info(
                "Reminder target %s already elapsed, not scheduling", target.isoformat()
            )
            return None

        if not self.permission_granted:
            logger.info(
                "Notification permission denied, reminder for %s not delivered",
                format_time(target),
            )
            return None

        try:
            alarm_id = await self._backend.schedule_one_shot(
                seconds_until,
                ALARM_TITLE,
                reminder_body(suggested_side),
                {"target_time": target.isoformat(), "suggested_side": suggested_side},
            )
        except Exception as e:
            logger.error("Error scheduling reminder: %s", e)
            return None

        self._target = target
        self._side = suggested_side
        self._alarm_id = alarm_id
        try:
            await self._render_countdown()
        except Exception as e:
            logger.error("Error presenting countdown: %s", e)
        self._countdown_task = asyncio.create_task(self._countdown_loop(target))
        logger.info(
            "Reminder set for %s (%s)", format_time(target), reminder_body(suggested_side)
        )
        return alarm_id

    async def cancel_all(self) -> None:
        """Stop the countdown, dismiss it and cancel every alarm. Idempotent."""
        await self._stop_countdown()
        self._target = None
        self._side = None
        self._alarm_id = None
        try:
            await self._backend.dismiss(COUNTDOWN_NOTIFICATION_ID)
        except Exception as e:
            logger.error("Error dismissing countdown: %s", e)
        try:
            await self._backend.cancel_all()
        except Exception as e:
            logger.error("Error canceling notifications: %s", e)

    async def close(self) -> None:
        await self.cancel_all()

    def status(self) -> ReminderStatus:
        countdown = None
        if self._target is not None:
            countdown = format_countdown(self._target - self._clock())
        return ReminderStatus(
            permission_granted=self.permission_granted,
            target_time=self._target,
            suggested_side=self._side,
            alarm_id=self._alarm_id,
            countdown=countdown,
            countdown_running=self.countdown_running,
        )

    async def _stop_countdown(self) -> None:
        task, self._countdown_task = self._countdown_task, None
        if task is None or task.done():
            return
        if task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _render_countdown(self) -> None:
        if self._target is None:
            return
        remaining = self._target - self._clock()
        await self._backend.present_immediate(
            COUNTDOWN_NOTIFICATION_ID,
            COUNTDOWN_TITLE,
            f"{format_countdown(remaining)} · {reminder_body(self._side)}",
            sticky=True,
            silent=True,
        )

    async def _countdown_loop(self, target: datetime) -> None:
        while True:
            # Last tick lands on the target, not on the next cadence step
            remaining = (target - self._clock()).total_seconds()
            await asyncio.sleep(min(self._refresh_seconds, max(0.0, remaining)))
            try:
                if self._clock() >= target:
                    await self._backend.dismiss(COUNTDOWN_NOTIFICATION_ID)
                    logger.info("Reminder target %s reached", format_time(target))
                    return
                await self._render_countdown()
            except Exception as e:
                logger.error("Error refreshing countdown: %s", e)
