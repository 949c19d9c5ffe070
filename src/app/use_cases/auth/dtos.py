"""
Authentication Flow DTOs (Data Transfer Objects)

Response shapes for the flow. Account secrets never leave through these.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from src.libs.result import Error
from src.domain.entities import AccountSnapshot, SessionRecord
from src.domain.flow_states import (
    Authenticated,
    FlowState,
    OtpChallenge,
    PasswordChallenge,
    SetCredential,
)


class AccountInfo(BaseModel):
    """Public account fields"""

    id: str
    email: str
    role: str
    created_at: datetime

    @classmethod
    def from_snapshot(cls, account: AccountSnapshot) -> "AccountInfo":
        return cls(
            id=str(account.id),
            email=account.email,
            role=account.role.value,
            created_at=account.created_at,
        )


class SessionInfo(BaseModel):
    """Current session as seen by consumers"""

    account: AccountInfo
    issued_at: datetime
    expires_at: datetime
    remember: bool

    @classmethod
    def from_record(cls, session: SessionRecord) -> "SessionInfo":
        return cls(
            account=AccountInfo.from_snapshot(session.account),
            issued_at=session.issued_at,
            expires_at=session.expires_at,
            remember=session.remember,
        )


class FlowStateInfo(BaseModel):
    """Flattened view of a flow state"""

    step: str
    email: Optional[str] = None
    mode: Optional[str] = None
    session: Optional[SessionInfo] = None

    @classmethod
    def from_state(cls, state: FlowState) -> "FlowStateInfo":
        if isinstance(state, PasswordChallenge):
            return cls(step=state.step, email=state.email)
        if isinstance(state, (OtpChallenge, SetCredential)):
            return cls(step=state.step, email=state.email, mode=state.mode.value)
        if isinstance(state, Authenticated):
            return cls(
                step=state.step,
                email=state.session.account.email,
                session=SessionInfo.from_record(state.session),
            )
        return cls(step=state.step)


class ErrorInfo(BaseModel):
    code: str
    message: str


class FlowResponse(BaseModel):
    """Response for every flow event"""

    state: FlowStateInfo
    error: Optional[ErrorInfo] = None

    @classmethod
    def build(cls, state: FlowState, error: Optional[Error]) -> "FlowResponse":
        return cls(
            state=FlowStateInfo.from_state(state),
            error=ErrorInfo(code=error.code, message=error.message) if error else None,
        )
