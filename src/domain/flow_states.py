"""
Authentication Flow States

Each step of the login/signup/reset flow carries only the data that step
actually has. The `step` field is the discriminator.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from src.domain.entities import AccountSnapshot, OtpMode, SessionRecord


class EmailEntry(BaseModel):
    """Initial state: waiting for an email address"""

    step: Literal["email_entry"] = "email_entry"


class PasswordChallenge(BaseModel):
    """Known account: waiting for its password"""

    step: Literal["password_challenge"] = "password_challenge"
    email: str
    account: AccountSnapshot


class OtpChallenge(BaseModel):
    """Waiting for the one-time code sent to `email`"""

    step: Literal["otp_challenge"] = "otp_challenge"
    mode: OtpMode
    email: str
    account: Optional[AccountSnapshot] = None


class SetCredential(BaseModel):
    """Email proven: waiting for a new secret (new account or reset)"""

    step: Literal["set_credential"] = "set_credential"
    mode: OtpMode
    email: str
    account: Optional[AccountSnapshot] = None


class Authenticated(BaseModel):
    """Terminal for the flow instance"""

    step: Literal["authenticated"] = "authenticated"
    session: SessionRecord


FlowState = Annotated[
    Union[EmailEntry, PasswordChallenge, OtpChallenge, SetCredential, Authenticated],
    Field(discriminator="step"),
]
