from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(
        status_code=exc.status_code, content={"error": error_dict, **exc.extra}
    )


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    from src.depends import init_db

    await init_db()
    yield
    # Let scheduled OTP deliveries finish before shutdown, including those of abandoned flows
    await app.state.auth_flow.otp.drain()


def create_app(ApplicationConfig) -> FastAPI:
    from src.depends import (
        AsyncSessionLocal,
        build_flow_factory,
        build_notification_channel,
        build_session_manager,
    )
    from src.app.use_cases.auth import CredentialVerifier

    app = FastAPI(title="RentX Auth", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # This process is the client: one session slot, one flow instance at a time
    app.state.session_manager = build_session_manager(ApplicationConfig)
    app.state.new_auth_flow = build_flow_factory(
        AsyncSessionLocal,
        app.state.session_manager,
        build_notification_channel(ApplicationConfig),
        CredentialVerifier(ApplicationConfig.CREDENTIAL_SCHEME),
    )
    app.state.auth_flow = app.state.new_auth_flow()

    from src.api.routes import account, auth

    app.include_router(auth.router, prefix=ApplicationConfig.API_PREFIX, tags=["Authentication"])
    app.include_router(account.router, prefix=ApplicationConfig.API_PREFIX, tags=["Account"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
