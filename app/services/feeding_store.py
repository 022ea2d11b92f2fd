"""Feeding store: the single source of truth behind the API.

Coordinates the session state machine, the persistence records and the
reminder scheduler. In-memory state is updated first; a failed write is
logged and does not roll the transition back.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

import aiosqlite

from app.models.feeding import (
    ActiveSession, DateWindow, FeedingRecord, FeedingStateResponse, FeedingSummary,
    FeedingType, Settings,
)
from app.models.reminder import ReminderStatus
from app.services import feeding_session, storage_service
from app.services.calculations import (
    calculate_age, filter_by_date_window, format_baby_age, format_elapsed, summarize,
)
from app.services.feeding_session import FeedingState
from app.services.notifications import NotificationBackend
from app.services.predictor import suggested_side
from app.services.reminder_scheduler import COUNTDOWN_REFRESH_SECONDS, ReminderScheduler
from app.services.storage_service import StorageResult

logger = logging.getLogger(__name__)


class FeedingStore:
    def __init__(
        self,
        db: aiosqlite.Connection,
        notifier: NotificationBackend,
        clock: Callable[[], datetime] = datetime.now,
        refresh_seconds: float = COUNTDOWN_REFRESH_SECONDS,
    ) -> None:
        self._db = db
        self._clock = clock
        self._lock = asyncio.Lock()
        self.state = FeedingState()
        self.scheduler = ReminderScheduler(notifier, clock=clock, refresh_seconds=refresh_seconds)

    # ── Lifecycle ──────────────────────────────────────────────────────────

    async def load(self) -> None:
        """Load persisted state and re-arm the reminder if one is still due."""
        async with self._lock:
            self.state.is_loading = True
            try:
                feedings, settings, session, last_side = await asyncio.gather(
                    storage_service.get_feedings(self._db),
                    storage_service.get_settings(self._db),
                    storage_service.get_active_session(self._db),
                    storage_service.get_last_side(self._db),
                )
                self.state.feedings = feedings
                self.state.settings = settings
                self.state.active_session = session
                self.state.last_side = last_side

                await self.scheduler.request_permissions()
                prediction = feeding_session.refresh_prediction(self.state)
                if prediction and prediction.reminder_time > self._clock():
                    await self.scheduler.schedule(
                        prediction.reminder_time, prediction.suggested_side
                    )
                else:
                    await self.scheduler.cancel_all()
                logger.info(
                    "Loaded %d feeding(s), session %s",
                    len(feedings), "active" if session else "idle",
                )
            finally:
                self.state.is_loading = False

    async def refresh(self) -> None:
        await self.load()

    async def close(self) -> None:
        await self.scheduler.close()

    # ── Transitions ────────────────────────────────────────────────────────

    async def start_feeding(self, feeding_type: FeedingType) -> ActiveSession:
        """Start a session; raises SessionAlreadyActiveError if one runs."""
        async with self._lock:
            session = feeding_session.start_feeding(self.state, feeding_type, self._clock())
            self._log_write(await storage_service.save_active_session(self._db, session))
            if feeding_type in ("left", "right"):
                self._log_write(await storage_service.save_last_side(self._db, feeding_type))
            await self.scheduler.cancel_all()
            logger.info("Feeding started: %s", feeding_type)
            return session

    async def stop_feeding(self, quantity_ml: Optional[int] = None) -> Optional[FeedingRecord]:
        """Stop the running session. Returns None (and does nothing) when idle."""
        async with self._lock:
            record = feeding_session.stop_feeding(self.state, quantity_ml, self._clock())
            if record is None:
                logger.info("Stop requested with no feeding in progress")
                return None

            self._log_write(await storage_service.save_feeding(self._db, record))
            self._log_write(await storage_service.save_active_session(self._db, None))
            logger.info(
                "Feeding stopped: %s, %d min", record.type, record.duration_minutes
            )
            await self._reschedule()
            return record

    async def update_settings(self, settings: Settings) -> Settings:
        async with self._lock:
            needs_reschedule = feeding_session.apply_settings(self.state, settings)
            self._log_write(await storage_service.save_settings(self._db, settings))
            if needs_reschedule:
                await self._reschedule()
            return settings

    async def clear_history(self) -> None:
        async with self._lock:
            feeding_session.clear_history(self.state)
            self._log_write(await storage_service.clear_feedings(self._db))
            await self.scheduler.cancel_all()
            logger.info("Feeding history cleared")

    # ── Read-only views ────────────────────────────────────────────────────

    def snapshot(self) -> FeedingStateResponse:
        now = self._clock()
        state = self.state
        age = calculate_age(state.settings.baby_birth_date, now)
        elapsed = None
        if state.active_session is not None:
            seconds = int((now - state.active_session.start_time).total_seconds())
            elapsed = format_elapsed(seconds)
        prediction = state.prediction
        return FeedingStateResponse(
            feedings=list(state.feedings),
            settings=state.settings,
            active_session=state.active_session,
            elapsed=elapsed,
            last_side=state.last_side,
            suggested_side=suggested_side(state.last_side),
            next_feeding_time=prediction.next_feeding_time if prediction else None,
            reminder_time=prediction.reminder_time if prediction else None,
            baby_age=age,
            baby_age_label=format_baby_age(age),
            is_loading=state.is_loading,
        )

    def history(self, window: Optional[DateWindow] = None) -> list[FeedingRecord]:
        if window is None:
            return list(self.state.feedings)
        return filter_by_date_window(self.state.feedings, window, self._clock())

    def summary(self, window: DateWindow) -> FeedingSummary:
        return summarize(self.state.feedings, window, self._clock())

    def reminder_status(self) -> ReminderStatus:
        return self.scheduler.status()

    # ── Internals ──────────────────────────────────────────────────────────

    async def _reschedule(self) -> None:
        prediction = self.state.prediction
        if prediction is None:
            await self.scheduler.cancel_all()
            return
        await self.scheduler.schedule(prediction.reminder_time, prediction.suggested_side)

    @staticmethod
    def _log_write(result: StorageResult) -> None:
        if not result.ok:
            logger.error("Error saving %s: %s", result.key, result.error)
