import asyncio
from typing import Set

from fastapi import Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.libs.result import Error
from src.adapter.services.notification_channel import (
    HttpNotificationChannel,
    LogNotificationChannel,
)
from src.adapter.services.session_store import JsonFileSessionStore
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.app.services.notification_channel import INotificationChannel
from src.app.use_cases.auth import (
    AccountDirectory,
    AuthFlowController,
    CredentialVerifier,
    OtpChallengeManager,
    SessionManager,
)
from src.domain.entities import SessionRecord

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def init_db(db_engine: AsyncEngine = engine) -> None:
    async with db_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


def build_notification_channel(config) -> INotificationChannel:
    if config.OTP_WEBHOOK_URL:
        return HttpNotificationChannel(config.OTP_WEBHOOK_URL, config.OTP_WEBHOOK_TIMEOUT)
    return LogNotificationChannel()


def build_session_manager(config) -> SessionManager:
    return SessionManager(JsonFileSessionStore(config.SESSION_STORE_PATH, config.SESSION_KEY))


def build_flow_factory(
    session_factory,
    sessions: SessionManager,
    channel: INotificationChannel,
    verifier: CredentialVerifier,
):
    """
    Each call yields a brand-new flow instance sharing the client's session
    slot and the set of OTP deliveries still in flight.
    """
    directory = AccountDirectory(lambda: SqlAlchemyUnitOfWork(session_factory))
    in_flight: Set[asyncio.Task] = set()

    def new_flow() -> AuthFlowController:
        return AuthFlowController(
            directory=directory,
            otp=OtpChallengeManager(channel, in_flight=in_flight),
            verifier=verifier,
            sessions=sessions,
        )

    return new_flow


def get_auth_flow(request: Request) -> AuthFlowController:
    return request.app.state.auth_flow


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def require_session(
    sessions: SessionManager = Depends(get_session_manager),
) -> SessionRecord:
    """
    Access gate for protected content.

    Returns:
        The valid session record

    Raises:
        ClientError: 401 if there is no session or it has expired
    """
    session = sessions.validate()
    if session is None:
        raise ClientError(
            Error("UNAUTHENTICATED", "Please log in to continue"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    return session
