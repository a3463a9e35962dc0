"""Industrial IoT Monitor — Pytest Configuration & Fixtures.

Provides an isolated testing environment with:
1. A fresh in-memory SQLite database per test.
2. AsyncClient for testing FastAPI endpoints against that database.
3. Fake push-channel subscribers and pinned random sources for the
   broadcast loop.

Usage:
    async def test_my_endpoint(client, machines):
        response = await client.get("/api/machines")
        assert response.status_code == 200
"""

import asyncio
import json
import os
import random
from typing import Any, AsyncGenerator

# Keep the app from starting the simulation or mounting a bundle on import
os.environ.setdefault("SIM_ENABLED", "false")
os.environ.setdefault("DB_SEED_ON_STARTUP", "false")
os.environ.setdefault("SERVER_STATIC_DIR", "__no_static_bundle__")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from starlette.websockets import WebSocketState

from api_server import app
from database import create_session_maker, create_tables, get_db
from db.models import Machine


# =============================================================================
# Database
# =============================================================================

@pytest_asyncio.fixture
async def db_engine():
    """In-memory database shared by every session of one test."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_maker(db_engine)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


# =============================================================================
# API Client
# =============================================================================

@pytest_asyncio.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app, with get_db pointed at the test database."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)

    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.pop(get_db, None)


# =============================================================================
# Fleet Fixtures
# =============================================================================

def machine_row(machine_id: str, name: str, status: str = "Active", **extra: Any) -> dict[str, Any]:
    """Minimal valid machine row."""
    row = {
        "id": machine_id,
        "name": name,
        "type": "Braiding Machine",
        "serial_number": f"SN-{machine_id}",
        "status": status,
    }
    row.update(extra)
    return row


async def insert_machines(session: AsyncSession, rows: list[dict[str, Any]]) -> None:
    for row in rows:
        session.add(Machine(**row))
    await session.commit()


@pytest_asyncio.fixture
async def machines(db_session) -> list[dict[str, Any]]:
    """Three machines: two Active, one Fault."""
    rows = [
        machine_row("M001", "Braider Alpha"),
        machine_row("M002", "Winder Pro"),
        machine_row("M003", "Twister X", status="Fault"),
    ]
    await insert_machines(db_session, rows)
    return rows


# =============================================================================
# Push Channel Fakes
# =============================================================================

class FakeSubscriber:
    """Stands in for a WebSocket: records what it was sent."""

    def __init__(self, state: WebSocketState = WebSocketState.CONNECTED, fail: bool = False):
        self.client_state = state
        self.application_state = state
        self.fail = fail
        self.messages: list[dict[str, Any]] = []

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("Cannot call send once a close message has been sent.")
        self.messages.append(json.loads(data))

    @property
    def types(self) -> list[str]:
        return [message["type"] for message in self.messages]


class FixedRolls(random.Random):
    """Random source whose next random() calls return preset values.

    Once the presets run out it behaves like a seeded Random. Selections
    (choice) draw from getrandbits and never consume the presets.
    """

    def __init__(self, *rolls: float, seed: int = 7):
        super().__init__(seed)
        self._rolls = list(rolls)

    def random(self) -> float:
        if self._rolls:
            return self._rolls.pop(0)
        return super().random()

    def getrandbits(self, k: int) -> int:
        return super().getrandbits(k)


@pytest.fixture
def subscriber() -> FakeSubscriber:
    return FakeSubscriber()


class StalledSubscriber(FakeSubscriber):
    """A peer that stopped reading: its sends never complete."""

    async def send_text(self, data: str) -> None:
        await asyncio.Event().wait()
