"""Test fixtures for the MediRoutines backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ["REMINDER_SCHEDULER_ENABLED"] = "false"
os.environ["SEED_PREDEFINED_MEDICINES"] = "false"

from app.core.config import get_settings
from app.core.security import get_password_hash
from app.db.base import Base
from app.db.session import dispose_engine, get_sessionmaker
from app.main import app
from app.models import PredefinedMedicine, User

USER_PASSWORD = "Passw0rd!"
USER_TIMEZONE = "Asia/Kolkata"


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


async def authenticate(client: AsyncClient, email: str, password: str) -> dict[str, str]:
    response = await client.post(
        "/api/v1/auth/token",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest_asyncio.fixture()
async def app_context(
    reset_database: AsyncIterator[None], db_url: str
) -> AsyncIterator[dict[str, Any]]:
    """Yield an authenticated client, a seeded user and a small catalog."""
    sessionmaker = get_sessionmaker(db_url)

    async with sessionmaker() as session:
        user = User(
            name="Asha",
            email="asha@example.com",
            hashed_password=get_password_hash(USER_PASSWORD),
            timezone=USER_TIMEZONE,
        )
        catalog = [
            PredefinedMedicine(name="Azithromycin"),
            PredefinedMedicine(name="Paracetamol"),
            PredefinedMedicine(name="Vitamin D3"),
        ]
        session.add(user)
        session.add_all(catalog)
        await session.commit()

        context: dict[str, Any] = {
            "sessionmaker": sessionmaker,
            "user_id": user.id,
            "email": user.email,
            "password": USER_PASSWORD,
            "predefined": {medicine.name: medicine.id for medicine in catalog},
        }

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        context["headers"] = await authenticate(client, user.email, USER_PASSWORD)
        yield context


@pytest.fixture()
def create_routine(
    app_context: dict[str, Any],
) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Create a routine through the API and return its JSON body."""

    async def _create(name: str, medicines: list[dict[str, Any]]) -> dict[str, Any]:
        response = await app_context["client"].post(
            "/api/v1/routines",
            json={"name": name, "medicines": medicines},
            headers=app_context["headers"],
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create
