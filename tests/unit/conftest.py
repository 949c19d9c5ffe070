from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.adapter.services.session_store import InMemorySessionStore
from src.app.use_cases.auth import (
    AccountDirectory,
    AuthFlowController,
    CredentialVerifier,
    OtpChallengeManager,
    SessionManager,
)


class FakeClock:
    """Manually advanced UTC clock"""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.accounts = MagicMock()
    uow.accounts.get_by_email = AsyncMock(return_value=None)
    uow.accounts.get_by_id = AsyncMock(return_value=None)
    uow.accounts.create = AsyncMock(side_effect=lambda account: account)
    uow.accounts.update = AsyncMock(side_effect=lambda account: account)
    return uow


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def channel():
    channel = MagicMock()
    channel.send = AsyncMock()
    return channel


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def sessions(session_store, clock):
    return SessionManager(session_store, clock=clock)


@pytest.fixture
def otp(channel, clock):
    return OtpChallengeManager(channel, clock=clock)


@pytest.fixture
def directory(mock_uow):
    return AccountDirectory(lambda: mock_uow)


@pytest.fixture
def flow(directory, otp, sessions):
    return AuthFlowController(
        directory=directory,
        otp=otp,
        verifier=CredentialVerifier("plain"),
        sessions=sessions,
    )
