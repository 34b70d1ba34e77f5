from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import app.db.models  # noqa: F401
from app.core.config import get_settings
from app.core.db import Base, get_db
from app.infrastructure.http import get_http_client
from app.main import app


class FakeUpstreams:
    """Подмена внешних API: обработчик на каждый хост, журнал вызовов"""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def route(self, host: str, handler) -> None:
        self.routes[host] = handler

    def count(self, host: str) -> int:
        return sum(1 for request in self.calls if request.url.host == host)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get(request.url.host)
        if handler is None:
            return httpx.Response(404, json={"message": "no route"})
        return handler(request)


@pytest.fixture()
def upstreams() -> FakeUpstreams:
    return FakeUpstreams()


@pytest.fixture()
def database_path(tmp_path: Path) -> Path:
    path = tmp_path / "registry.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return path


@pytest.fixture()
def session_factory(database_path: Path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{database_path}", poolclass=NullPool)
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
def api_client(settings, session_factory, upstreams):
    async def override_db():
        async with session_factory() as session:
            yield session

    async def override_http_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(upstreams)) as client:
            yield client

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_http_client] = override_http_client
    app.dependency_overrides[get_settings] = lambda: settings

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
