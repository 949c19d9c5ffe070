from unittest.mock import AsyncMock, MagicMock

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from src.adapter.services.session_store import InMemorySessionStore
from src.app.use_cases.auth import CredentialVerifier, SessionManager
from src.depends import build_flow_factory


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def channel():
    channel = MagicMock()
    channel.send = AsyncMock()
    return channel


@pytest_asyncio.fixture
async def app(session_factory, channel):
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    sessions = SessionManager(InMemorySessionStore())
    app.state.session_manager = sessions
    app.state.new_auth_flow = build_flow_factory(
        session_factory, sessions, channel, CredentialVerifier("bcrypt")
    )
    app.state.auth_flow = app.state.new_auth_flow()
    return app


@pytest_asyncio.fixture
async def client(app):
    from httpx import ASGITransport

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
