"""FastAPI integration tests.

Strategy:
- In-memory SQLite store per test, fake clock and recording notifier.
- The real app (main.py) with the store dependency overridden; the lifespan
  is not run by ASGITransport.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.api.dependencies import get_store
from main import app

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def client(store):
    """HTTP test client bound to the test feeding store."""
    app.dependency_overrides[get_store] = lambda: store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


SETTINGS = {
    "interval_minutes": 90,
    "night_notifications_enabled": False,
    "baby_name": "Lena",
    "baby_birth_date": "2024-12-01",
}


# ---------------------------------------------------------------------------
# /health
# ---------------------------------------------------------------------------

async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "notifications_permitted": True,
        "session_active": False,
    }


async def test_store_not_initialized():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        resp = await ac.get("/health")
    assert resp.status_code == 503


# ---------------------------------------------------------------------------
# /session
# ---------------------------------------------------------------------------

async def test_start_and_stop_breast_feeding(client: AsyncClient, clock):
    resp = await client.post("/session/start", json={"type": "left"})
    assert resp.status_code == 201
    assert resp.json()["type"] == "left"

    clock.advance(minutes=23)
    resp = await client.post("/session/stop")
    assert resp.status_code == 200
    data = resp.json()
    assert data["type"] == "left"
    assert data["duration_minutes"] == 23
    assert "quantity_ml" not in data

    state = (await client.get("/session")).json()
    assert state["last_side"] == "left"
    assert state["suggested_side"] == "right"
    assert state["active_session"] is None
    assert state["next_feeding_time"] is not None


async def test_stop_bottle_with_quantity(client: AsyncClient, clock):
    await client.post("/session/start", json={"type": "bottle"})
    clock.advance(minutes=10)
    resp = await client.post("/session/stop", json={"quantity_ml": 150})
    assert resp.status_code == 200
    assert resp.json()["quantity_ml"] == 150


async def test_start_twice_conflicts(client: AsyncClient):
    await client.post("/session/start", json={"type": "right"})
    resp = await client.post("/session/start", json={"type": "left"})
    assert resp.status_code == 409


async def test_stop_while_idle_conflicts(client: AsyncClient):
    resp = await client.post("/session/stop")
    assert resp.status_code == 409


async def test_invalid_feeding_type(client: AsyncClient):
    resp = await client.post("/session/start", json={"type": "spoon"})
    assert resp.status_code == 422


async def test_invalid_quantity(client: AsyncClient):
    await client.post("/session/start", json={"type": "bottle"})
    resp = await client.post("/session/stop", json={"quantity_ml": 0})
    assert resp.status_code == 422


async def test_running_session_in_state(client: AsyncClient, clock):
    await client.post("/session/start", json={"type": "left"})
    clock.advance(seconds=75)
    state = (await client.get("/session")).json()
    assert state["active_session"]["type"] == "left"
    assert state["elapsed"] == "01:15"
    assert state["next_feeding_time"] is None


async def test_refresh(client: AsyncClient):
    resp = await client.post("/session/refresh")
    assert resp.status_code == 200
    assert resp.json()["is_loading"] is False


# ---------------------------------------------------------------------------
# /feedings
# ---------------------------------------------------------------------------

async def test_history_and_summary(client: AsyncClient, clock):
    for ftype, minutes in [("left", 20), ("right", 15)]:
        await client.post("/session/start", json={"type": ftype})
        clock.advance(minutes=minutes)
        await client.post("/session/stop")

    resp = await client.get("/feedings")
    assert resp.status_code == 200
    assert [f["type"] for f in resp.json()] == ["right", "left"]

    resp = await client.get("/feedings?window=yesterday")
    assert resp.json() == []

    resp = await client.get("/feedings/summary?window=today")
    assert resp.status_code == 200
    assert resp.json()["count"] == 2
    assert resp.json()["total_formatted"] == "35 min"


async def test_invalid_window(client: AsyncClient):
    resp = await client.get("/feedings?window=lastyear")
    assert resp.status_code == 422


async def test_clear_history(client: AsyncClient, clock):
    await client.post("/session/start", json={"type": "left"})
    clock.advance(minutes=5)
    await client.post("/session/stop")

    resp = await client.delete("/feedings")
    assert resp.status_code == 204
    assert (await client.get("/feedings")).json() == []


# ---------------------------------------------------------------------------
# /settings and /reminder
# ---------------------------------------------------------------------------

async def test_update_settings_moves_reminder(client: AsyncClient, clock):
    await client.post("/session/start", json={"type": "left"})
    clock.advance(minutes=20)
    await client.post("/session/stop")
    end = clock()

    resp = await client.put("/settings", json=SETTINGS)
    assert resp.status_code == 200
    assert resp.json()["baby_name"] == "Lena"
    assert (await client.get("/settings")).json()["interval_minutes"] == 90

    reminder = (await client.get("/reminder")).json()
    assert reminder["target_time"] == (end + timedelta(minutes=90)).isoformat()
    assert reminder["suggested_side"] == "right"
    assert reminder["countdown"] == "1h 30m"


@pytest.mark.parametrize(
    "override",
    [{"interval_minutes": 0}, {"baby_name": "   "}, {"baby_birth_date": "not-a-date"}],
)
async def test_invalid_settings(client: AsyncClient, override):
    resp = await client.put("/settings", json={**SETTINGS, **override})
    assert resp.status_code == 422


async def test_reminder_idle(client: AsyncClient):
    resp = await client.get("/reminder")
    assert resp.status_code == 200
    data = resp.json()
    assert data["target_time"] is None
    assert data["countdown_running"] is False
