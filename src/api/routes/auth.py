from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, Field

from src.libs.result import Result
from src.api.error import ClientError, ServerError
from src.app.use_cases.auth import (
    AuthFlowController,
    FlowResponse,
    FlowStateInfo,
    SessionInfo,
    SessionManager,
)
from src.depends import get_auth_flow, get_session_manager, require_session
from src.domain.entities import SessionRecord
from src.domain.flow_states import FlowState

router = APIRouter(prefix="/auth", tags=["Authentication"])

ERROR_STATUS = {
    "CREDENTIAL_MISMATCH": status.HTTP_401_UNAUTHORIZED,
    "STORE_ERROR": status.HTTP_503_SERVICE_UNAVAILABLE,
    "FLOW_BUSY": status.HTTP_409_CONFLICT,
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
    "INVALID_INPUT": status.HTTP_400_BAD_REQUEST,
}


def _respond(flow: AuthFlowController, result: Result[FlowState]) -> FlowResponse:
    """Map a flow Result to the HTTP response, keeping the unchanged state on errors"""
    if result.is_err():
        error = result.error
        status_code = ERROR_STATUS.get(error.code)
        if status_code is None:
            raise ServerError(error)
        state = FlowStateInfo.from_state(flow.current_state())
        raise ClientError(
            error, status_code=status_code, extra={"state": state.model_dump(mode="json")}
        )
    return FlowResponse.build(result.value, None)


class SubmitRequest(BaseModel):
    """
    Flow submit payload

    `value` is the email, password, one-time code or new password,
    depending on the current step.
    """

    value: str = Field(..., max_length=255, description="Input for the current step")
    remember: bool = Field(False, description="Keep the session for 7 days instead of 1")


@router.get("/flow", response_model=FlowResponse)
async def flow_state(flow: AuthFlowController = Depends(get_auth_flow)):
    """Current step of the login flow and the last error to display, if any"""
    return FlowResponse.build(flow.current_state(), flow.last_error())


@router.post("/flow/submit", response_model=FlowResponse)
async def submit(request: SubmitRequest, flow: AuthFlowController = Depends(get_auth_flow)):
    """
    Advance the flow with the input of the current step.

    Raises:
        - 401 Unauthorized: Wrong password or code (CREDENTIAL_MISMATCH)
        - 409 Conflict: Request in progress (FLOW_BUSY) or wrong step
        - 400 Bad Request: Empty or overlong input (INVALID_INPUT)
        - 503 Service Unavailable: Account store failure (STORE_ERROR)
    """
    result = await flow.submit(request.value, remember=request.remember)
    return _respond(flow, result)


@router.post("/flow/resend", response_model=FlowResponse)
async def resend(flow: AuthFlowController = Depends(get_auth_flow)):
    """Send a new one-time code; the previous one stops working"""
    return _respond(flow, await flow.resend())


@router.post("/flow/forgot-password", response_model=FlowResponse)
async def forgot_password(flow: AuthFlowController = Depends(get_auth_flow)):
    """Switch from the password prompt to a reset code"""
    return _respond(flow, await flow.forgot_password())


@router.post("/flow/change-email", response_model=FlowResponse)
async def change_email(flow: AuthFlowController = Depends(get_auth_flow)):
    """Drop everything entered so far and go back to the email prompt"""
    return _respond(flow, flow.change_email())


@router.post("/flow/logout", response_model=FlowResponse)
async def flow_logout(flow: AuthFlowController = Depends(get_auth_flow)):
    """End the session issued by this flow instance"""
    return _respond(flow, flow.logout())


@router.get("/session", response_model=SessionInfo)
async def current_session(session: SessionRecord = Depends(require_session)):
    """
    Session check used by route guards.

    Raises:
        - 401 Unauthorized: No session, or it has expired (UNAUTHENTICATED)
    """
    return SessionInfo.from_record(session)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    request: Request, sessions: SessionManager = Depends(get_session_manager)
):
    """Header logout: clear the session slot and abandon any flow in progress"""
    sessions.terminate()
    request.app.state.auth_flow = request.app.state.new_auth_flow()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
