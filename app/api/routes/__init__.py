"""Package routes: exports every FastAPI router."""

from .feedings import router as feedings_router
from .health import router as health_router
from .reminder import router as reminder_router
from .session import router as session_router
from .settings import router as settings_router

__all__ = [
    "health_router", "session_router", "feedings_router",
    "settings_router", "reminder_router",
]
