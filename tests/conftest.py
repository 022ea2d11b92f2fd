"""Shared fixtures across tests: in-memory SQLite, fake clock, fake notifier."""

from datetime import datetime, timedelta

import aiosqlite
import pytest
import pytest_asyncio

from app.services.database import _CREATE_KV_STORE
from app.services.feeding_store import FeedingStore

T0 = datetime(2025, 1, 15, 10, 0, 0)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class RecordingNotifier:
    """NotificationBackend that records every call instead of notifying."""

    def __init__(self, granted: bool = True) -> None:
        self.granted = granted
        self.scheduled: dict[str, dict] = {}   # alarms still live
        self.history: list[dict] = []          # every alarm ever scheduled
        self.presented: dict[str, dict] = {}
        self.dismissed: list[str] = []
        self.cancel_calls = 0
        self._counter = 0

    async def request_permissions(self) -> bool:
        return self.granted

    async def schedule_one_shot(self, delay_seconds, title, body, data) -> str:
        self._counter += 1
        alarm_id = f"alarm-{self._counter}"
        entry = {"id": alarm_id, "delay": delay_seconds, "title": title, "body": body, "data": data}
        self.scheduled[alarm_id] = entry
        self.history.append(entry)
        return alarm_id

    async def cancel_all(self) -> None:
        self.cancel_calls += 1
        self.scheduled.clear()

    async def present_immediate(self, identifier, title, body, sticky=True, silent=True) -> None:
        self.presented[identifier] = {"title": title, "body": body, "sticky": sticky, "silent": silent}

    async def dismiss(self, identifier) -> None:
        self.dismissed.append(identifier)
        self.presented.pop(identifier, None)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture
async def db():
    """In-memory SQLite connection with the key-value table."""
    async with aiosqlite.connect(":memory:") as conn:
        conn.row_factory = aiosqlite.Row
        await conn.execute(_CREATE_KV_STORE)
        await conn.commit()
        yield conn


@pytest_asyncio.fixture
async def store(db, notifier, clock):
    """Loaded feeding store on an empty database."""
    feeding_store = FeedingStore(db, notifier, clock=clock, refresh_seconds=3600)
    await feeding_store.load()
    yield feeding_store
    await feeding_store.close()


class BrokenNotifier(RecordingNotifier):
    """Notification service that fails to schedule."""

    async def schedule_one_shot(self, delay_seconds, title, body, data) -> str:
        raise RuntimeError("notification service unavailable")


@pytest.fixture
def denied_notifier() -> RecordingNotifier:
    return RecordingNotifier(granted=False)


@pytest.fixture
def broken_notifier() -> BrokenNotifier:
    return BrokenNotifier()


class DismissFailingNotifier(RecordingNotifier):
    """Notification service whose countdown dismissal always fails."""

    async def dismiss(self, identifier) -> None:
        raise RuntimeError("dismiss failed")


@pytest.fixture
def dismiss_failing_notifier() -> DismissFailingNotifier:
    return DismissFailingNotifier()
