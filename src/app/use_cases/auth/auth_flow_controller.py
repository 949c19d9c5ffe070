"""
Auth Flow Controller

State machine driving email -> password-or-OTP -> set credential -> session.
"""

import logging
from typing import Awaitable, Callable, Optional

from src.libs.result import Error, Result, Return
from src.domain.entities import AccountSnapshot, OtpMode, SessionRecord
from src.domain.flow_states import (
    Authenticated,
    EmailEntry,
    FlowState,
    OtpChallenge,
    PasswordChallenge,
    SetCredential,
)
from .account_directory import AccountDirectory
from .credential_verifier import CredentialVerifier
from .otp_challenge_manager import OtpChallengeManager
from .session_manager import SessionManager

logger = logging.getLogger(__name__)

FLOW_BUSY = Error("FLOW_BUSY", "Please wait for the current request to finish.")
EMPTY_INPUT = Error("INVALID_INPUT", "This field is required.")
SECRET_TOO_LONG = Error("INVALID_INPUT", "Password is too long.")
WRONG_PASSWORD = Error("CREDENTIAL_MISMATCH", "Incorrect Password.")
WRONG_CODE = Error("CREDENTIAL_MISMATCH", "Incorrect OTP.")
SESSION_SAVE_FAILED = Error("STORE_ERROR", "Failed to save session.")


def _invalid(event: str, state: FlowState) -> Error:
    return Error("INVALID_TRANSITION", f"Cannot {event} during {state.step}")


class AuthFlowController:
    """
    One flow instance per client.

    Business Rules:
    - Unknown email -> OTP (CREATE); known email -> password
    - Forgot password -> OTP (RESET) for the same account
    - Correct OTP -> set a new secret, then create or update the account
    - Every success ends in a freshly issued session
    - OTP delivery is never awaited; the flow moves to the code prompt
      as soon as delivery is scheduled
    - While a call is outstanding, further events are rejected (FLOW_BUSY)
    - A failed event leaves the state untouched and records last_error
    """

    def __init__(
        self,
        directory: AccountDirectory,
        otp: OtpChallengeManager,
        verifier: CredentialVerifier,
        sessions: SessionManager,
    ):
        self.directory = directory
        self.otp = otp
        self.verifier = verifier
        self.sessions = sessions

        self._state: FlowState = EmailEntry()
        self._error: Optional[Error] = None
        self._busy = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def current_state(self) -> FlowState:
        return self._state

    def last_error(self) -> Optional[Error]:
        return self._error

    @property
    def busy(self) -> bool:
        return self._busy

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def submit(self, value: str, remember: bool = False) -> Result[FlowState]:
        """
        Submit the input of the current step.

        Args:
            value: Email, password, one-time code or new secret depending on state
            remember: Extend the issued session to 7 days (password/set steps)

        Returns:
            Result with the new state, or Error (state unchanged)
        """
        if self._busy:
            return self._fail(FLOW_BUSY)

        state = self._state
        if isinstance(state, Authenticated):
            return self._fail(_invalid("submit", state))
        if not value:
            return self._fail(EMPTY_INPUT)

        if isinstance(state, EmailEntry):
            return await self._guarded(lambda: self._submit_email(value))
        if isinstance(state, PasswordChallenge):
            return self._submit_password(state, value, remember)
        if isinstance(state, OtpChallenge):
            return self._submit_code(state, value)
        return await self._guarded(lambda: self._submit_credential(state, value, remember))

    async def forgot_password(self) -> Result[FlowState]:
        if self._busy:
            return self._fail(FLOW_BUSY)
        state = self._state
        if not isinstance(state, PasswordChallenge):
            return self._fail(_invalid("reset password", state))

        self.otp.issue(state.email, OtpMode.reset)
        return self._advance(
            OtpChallenge(mode=OtpMode.reset, email=state.email, account=state.account)
        )

    async def resend(self) -> Result[FlowState]:
        if self._busy:
            return self._fail(FLOW_BUSY)
        state = self._state
        if not isinstance(state, OtpChallenge) or self.otp.resend() is None:
            return self._fail(_invalid("resend code", state))

        logger.info(f"OTP re-issued for {state.email}")
        return self._advance(state)

    def change_email(self) -> Result[FlowState]:
        if self._busy:
            return self._fail(FLOW_BUSY)
        state = self._state
        if not isinstance(state, (OtpChallenge, PasswordChallenge)):
            return self._fail(_invalid("change email", state))

        self.otp.discard()
        return self._advance(EmailEntry())

    def logout(self) -> Result[FlowState]:
        if self._busy:
            return self._fail(FLOW_BUSY)
        state = self._state
        if not isinstance(state, Authenticated):
            return self._fail(_invalid("log out", state))

        self.sessions.terminate()
        logger.info(f"Logged out {state.session.account.id}")
        return self._advance(EmailEntry())

    # ------------------------------------------------------------------
    # Step handlers
    # ------------------------------------------------------------------

    async def _submit_email(self, email: str) -> Result[FlowState]:
        result = await self.directory.find_by_email(email)
        if result.is_err():
            return self._fail(result.error)

        account = result.value
        if account is not None:
            return self._advance(
                PasswordChallenge(email=email, account=AccountSnapshot.from_account(account))
            )

        # Not awaited: the code prompt is shown whether or not delivery succeeds
        self.otp.issue(email, OtpMode.create)
        return self._advance(OtpChallenge(mode=OtpMode.create, email=email))

    def _submit_password(
        self, state: PasswordChallenge, password: str, remember: bool
    ) -> Result[FlowState]:
        if not self.verifier.verify(password, state.account.credential_secret):
            return self._fail(WRONG_PASSWORD)
        return self._authenticate(state.account, remember)

    def _submit_code(self, state: OtpChallenge, code: str) -> Result[FlowState]:
        if not self.otp.verify(code):
            return self._fail(WRONG_CODE)

        self.otp.discard()
        return self._advance(
            SetCredential(mode=state.mode, email=state.email, account=state.account)
        )

    async def _submit_credential(
        self, state: SetCredential, secret: str, remember: bool
    ) -> Result[FlowState]:
        try:
            protected = self.verifier.protect(secret)
        except ValueError:
            return self._fail(SECRET_TOO_LONG)

        # An account already saved by an earlier attempt is updated, never re-created
        if state.account is not None:
            result = await self.directory.update_credential(state.account.id, protected)
        else:
            result = await self.directory.create_account(state.email, protected)

        if result.is_err():
            return self._fail(result.error)

        account = AccountSnapshot.from_account(result.value)
        authenticated = self._authenticate(account, remember)
        if authenticated.is_err():
            self._state = SetCredential(mode=state.mode, email=state.email, account=account)
        return authenticated

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _authenticate(self, account: AccountSnapshot, remember: bool) -> Result[FlowState]:
        try:
            session: SessionRecord = self.sessions.issue(account, remember)
        except (OSError, TypeError, ValueError) as exc:
            logger.error(f"Could not persist session for {account.id}: {exc}")
            return self._fail(SESSION_SAVE_FAILED)
        return self._advance(Authenticated(session=session))

    async def _guarded(
        self, handler: Callable[[], Awaitable[Result[FlowState]]]
    ) -> Result[FlowState]:
        self._busy = True
        try:
            return await handler()
        finally:
            self._busy = False

    def _advance(self, state: FlowState) -> Result[FlowState]:
        if state.step != self._state.step:
            logger.debug(f"Auth flow: {self._state.step} -> {state.step}")
        self._state = state
        self._error = None
        return Return.ok(state)

    def _fail(self, error: Error) -> Result[FlowState]:
        logger.warning(f"Auth flow error in {self._state.step}: {error.code}")
        self._error = error
        return Return.err(error)
