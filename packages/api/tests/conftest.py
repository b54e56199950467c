# This project was developed with assistance from AI tools.
"""Shared fixtures: in-memory async SQLite database and an app client factory.

Every test gets a fresh schema. Route tests drive the real app through
``httpx.AsyncClient`` with ``get_db`` and ``get_current_user`` overridden;
``_clean_overrides`` clears them afterwards so one test's persona never
leaks into the next.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import httpx  # noqa: E402
import pytest  # noqa: E402
from db import DatabaseService, get_db  # noqa: E402
from fastapi import HTTPException, Request  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.main import app as real_app  # noqa: E402
from src.middleware.auth import get_current_user  # noqa: E402
from src.schemas.auth import UserContext  # noqa: E402


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await DatabaseService(engine=eng).create_all()
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture(autouse=True)
def _clean_overrides():
    """Clear app dependency overrides after each test."""
    yield
    real_app.dependency_overrides.clear()


@pytest.fixture
def app():
    return real_app


_PERSONA_HEADER = "X-Test-Persona"


@pytest.fixture
async def client_factory(app, session_factory):
    """Factory fixture: return an AsyncClient acting as ``user`` (None = anonymous).

    Several personas can be active in one test; each client sends a header
    naming its persona and the ``get_current_user`` override resolves it.
    Each request gets its own session from the test database.
    """
    personas: dict[str, UserContext] = {}
    clients: list[httpx.AsyncClient] = []

    async def _get_db():
        async with session_factory() as s:
            yield s

    async def _current_user(request: Request) -> UserContext:
        user = personas.get(request.headers.get(_PERSONA_HEADER, ""))
        if user is None:
            raise HTTPException(status_code=401, detail="Missing authentication token")
        return user

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_current_user] = _current_user

    def _make(user: UserContext | None) -> httpx.AsyncClient:
        headers = {}
        if user is not None:
            personas[user.user_id] = user
            headers[_PERSONA_HEADER] = user.user_id
        client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://test",
            headers=headers,
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
