"""Feeding tracker API application entry point."""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()  # load .env before anything reads os.getenv()

from fastapi import FastAPI

from app.api.routes import (
    feedings_router, health_router, reminder_router, session_router, settings_router,
)
from app.services.database import DATABASE_URL, connect, create_tables
from app.services.feeding_store import FeedingStore
from app.services.notifications import LocalNotificationCenter

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open storage, load the feeding store and arm the pending reminder."""
    await create_tables()
    db = await connect()
    notifier = LocalNotificationCenter()
    store = FeedingStore(db, notifier)
    await store.load()
    app.state.notifier = notifier
    app.state.feeding_store = store
    logger.info("Feeding store loaded from %s", DATABASE_URL)

    yield

    # Shutdown: stop the countdown and pending alarms, then close the DB
    await store.close()
    await notifier.close()
    await db.close()
    logger.info("Feeding tracker API stopped")


app = FastAPI(
    title="Feeding Tracker API",
    description=(
        "Infant feeding tracker: breast / bottle sessions, next-feeding "
        "prediction and reminders with night-mode deferral."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(session_router)
app.include_router(feedings_router)
app.include_router(settings_router)
app.include_router(reminder_router)
