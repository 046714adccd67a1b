import asyncio
import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.db.session import enable_sqlite_foreign_keys, get_db, init_db
from app.main import app
from app.services.notifier import ChangeNotifier


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite'}")
    enable_sqlite_foreign_keys(engine)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return ChangeNotifier()


@pytest.fixture
def subscription(notifier):
    return notifier.subscribe()


@pytest.fixture
def next_event(subscription):
    """Siguiente evento publicado, ya decodificado"""

    async def _next_event():
        message = await asyncio.wait_for(subscription.next_message(), timeout=1)
        return json.loads(message)

    return _next_event


@pytest_asyncio.fixture
async def client(session_factory, notifier):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.notifier = notifier
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_city(client):
    async def _make_city(name: str) -> dict:
        response = await client.post("/api/cities", json={"name": name})
        assert response.status_code == 201, response.text
        return response.json()

    return _make_city
