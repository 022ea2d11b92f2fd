"""Key-value persistence for feedings, settings, active session and last side.

Reads never raise: an absent, unparsable or unreadable record yields a typed
default. Writes never raise either: they return a `StorageResult` that the
feeding store logs.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import aiosqlite
from pydantic import TypeAdapter, ValidationError

from app.models.feeding import ActiveSession, BreastSide, FeedingRecord, Settings

logger = logging.getLogger(__name__)

FEEDINGS_KEY = "feedings"
SETTINGS_KEY = "settings"
ACTIVE_SESSION_KEY = "active_session"
LAST_SIDE_KEY = "last_side"

DEFAULT_LAST_SIDE: BreastSide = "right"

_FEEDINGS_ADAPTER = TypeAdapter(list[FeedingRecord])
_READ_ERRORS = (aiosqlite.Error, ValueError, ValidationError)


@dataclass(frozen=True)
class StorageResult:
    """Outcome of a write. Failures are reported, not raised."""
    key: str
    ok: bool
    error: Optional[str] = None


def default_settings() -> Settings:
    return Settings()


async def _get(db: aiosqlite.Connection, key: str) -> Optional[str]:
    async with db.execute("SELECT value FROM kv_store WHERE key = ?", (key,)) as cur:
        row = await cur.fetchone()
    return row[0] if row else None


async def _set(db: aiosqlite.Connection, key: str, value: str) -> StorageResult:
    try:
        await db.execute(
            """INSERT INTO kv_store (key, value) VALUES (?, ?)
               ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                              updated_at = datetime('now')""",
            (key, value),
        )
        await db.commit()
    except (aiosqlite.Error, ValueError) as e:
        return StorageResult(key=key, ok=False, error=str(e))
    return StorageResult(key=key, ok=True)


async def _remove(db: aiosqlite.Connection, key: str) -> StorageResult:
    try:
        await db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        await db.commit()
    except (aiosqlite.Error, ValueError) as e:
        return StorageResult(key=key, ok=False, error=str(e))
    return StorageResult(key=key, ok=True)


# ── Feedings ───────────────────────────────────────────────────────────────


async def get_feedings(db: aiosqlite.Connection) -> list[FeedingRecord]:
    """Return the history, most recent first."""
    try:
        raw = await _get(db, FEEDINGS_KEY)
        return _FEEDINGS_ADAPTER.validate_json(raw) if raw else []
    except _READ_ERRORS as e:
        logger.error("Error loading feedings: %s", e)
        return []


async def save_feedings(
    db: aiosqlite.Connection, feedings: list[FeedingRecord]
) -> StorageResult:
    payload = _FEEDINGS_ADAPTER.dump_json(feedings, exclude_none=True).decode()
    return await _set(db, FEEDINGS_KEY, payload)


async def save_feeding(db: aiosqlite.Connection, feeding: FeedingRecord) -> StorageResult:
    """Prepend one record to the stored history."""
    feedings = await get_feedings(db)
    feedings.insert(0, feeding)
    return await save_feedings(db, feedings)


async def clear_feedings(db: aiosqlite.Connection) -> StorageResult:
    return await _remove(db, FEEDINGS_KEY)


# ── Settings ───────────────────────────────────────────────────────────────


async def get_settings(db: aiosqlite.Connection) -> Settings:
    try:
        raw = await _get(db, SETTINGS_KEY)
        return Settings.model_validate_json(raw) if raw else default_settings()
    except _READ_ERRORS as e:
        logger.error("Error loading settings: %s", e)
        return default_settings()


async def save_settings(db: aiosqlite.Connection, settings: Settings) -> StorageResult:
    return await _set(db, SETTINGS_KEY, settings.model_dump_json())


# ── Active session ─────────────────────────────────────────────────────────


async def get_active_session(db: aiosqlite.Connection) -> Optional[ActiveSession]:
    try:
        raw = await _get(db, ACTIVE_SESSION_KEY)
        return ActiveSession.model_validate_json(raw) if raw else None
    except _READ_ERRORS as e:
        logger.error("Error loading active session: %s", e)
        return None


async def save_active_session(
    db: aiosqlite.Connection, session: Optional[ActiveSession]
) -> StorageResult:
    """Store the session, or remove the record when `session` is None."""
    if session is None:
        return await _remove(db, ACTIVE_SESSION_KEY)
    return await _set(db, ACTIVE_SESSION_KEY, session.model_dump_json())


# ── Last side ──────────────────────────────────────────────────────────────


async def get_last_side(db: aiosqlite.Connection) -> BreastSide:
    try:
        raw = await _get(db, LAST_SIDE_KEY)
    except _READ_ERRORS as e:
        logger.error("Error loading last side: %s", e)
        return DEFAULT_LAST_SIDE
    if raw is None:
        return DEFAULT_LAST_SIDE
    return raw if raw in ("left", "right") else DEFAULT_LAST_SIDE


async def save_last_side(db: aiosqlite.Connection, side: BreastSide) -> StorageResult:
    return await _set(db, LAST_SIDE_KEY, side)
