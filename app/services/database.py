"""SQLite initialization and async connection management via aiosqlite."""

import os

import aiosqlite

DATABASE_URL = os.getenv("DATABASE_URL", "data/feeding.db")

__all__ = ["DATABASE_URL", "create_tables", "connect", "_CREATE_KV_STORE"]

# One row per logical record (feedings, settings, active_session, last_side)
_CREATE_KV_STORE = """
CREATE TABLE IF NOT EXISTS kv_store (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (datetime('now'))
)
"""


async def create_tables(db_url: str = DATABASE_URL) -> None:
    """Create the key-value table if it doesn't exist."""
    os.makedirs(os.path.dirname(db_url) if os.path.dirname(db_url) else ".", exist_ok=True)
    async with aiosqlite.connect(db_url) as db:
        await db.execute(_CREATE_KV_STORE)
        await db.commit()


async def connect(db_url: str = DATABASE_URL) -> aiosqlite.Connection:
    """Open a long-lived connection for the feeding store."""
    db = await aiosqlite.connect(db_url)
    db.row_factory = aiosqlite.Row
    return db

