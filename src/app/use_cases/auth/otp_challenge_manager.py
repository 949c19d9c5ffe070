"""
OTP Challenge Manager

Generates, dispatches and verifies the one-time code of a single flow instance.
"""

import asyncio
import logging
import secrets
from datetime import UTC, datetime
from typing import Callable, Optional, Set

from src.app.services.notification_channel import INotificationChannel
from src.domain.entities import OneTimeCode, OtpMode

logger = logging.getLogger(__name__)

CODE_MIN = 1000
CODE_MAX = 9999


class OtpChallengeManager:
    """
    Holds at most one live code.

    Business Rules:
    - Codes are 4 digits drawn uniformly from 1000-9999 (no leading zero)
    - Issuing a code (first send or resend) invalidates the previous one
    - Delivery is fire-and-forget: dispatch() schedules the send and returns,
      failures are logged and never reach the caller
    - No expiry and no attempt limit
    - The code lives only in memory and is dropped with the flow instance
    """

    def __init__(
        self,
        channel: INotificationChannel,
        clock: Optional[Callable[[], datetime]] = None,
        in_flight: Optional[Set[asyncio.Task]] = None,
    ):
        self.channel = channel
        self.clock = clock or (lambda: datetime.now(UTC))
        self._live: Optional[OneTimeCode] = None
        # May be shared between flow instances so abandoned deliveries are still drained
        self._in_flight: Set[asyncio.Task] = in_flight if in_flight is not None else set()

    @property
    def pending(self) -> int:
        """Deliveries scheduled and not yet finished"""
        return len(self._in_flight)

    @property
    def live(self) -> Optional[OneTimeCode]:
        return self._live

    def generate(self, email: str, mode: OtpMode) -> OneTimeCode:
        """Draw a new code and make it the only live one"""
        code = str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))
        self._live = OneTimeCode(
            code=code, target_email=email, issued_at=self.clock(), mode=mode
        )
        return self._live

    def dispatch(self, email: str, code: str) -> asyncio.Task:
        """
        Schedule delivery of `code` to `email` without awaiting it.

        Must be called from a running event loop. The returned task is only
        exposed for shutdown/test draining; flow logic never awaits it.
        """
        task = asyncio.create_task(self._deliver(email, code))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    def issue(self, email: str, mode: OtpMode) -> OneTimeCode:
        """generate() + dispatch()"""
        otp = self.generate(email, mode)
        self.dispatch(otp.target_email, otp.code)
        return otp

    def resend(self) -> Optional[OneTimeCode]:
        """Re-issue for the live code's email and mode; None if nothing is live"""
        if self._live is None:
            return None
        return self.issue(self._live.target_email, self._live.mode)

    def verify(self, candidate: str) -> bool:
        if self._live is None or candidate is None:
            return False
        return secrets.compare_digest(
            candidate.encode("utf-8"), self._live.code.encode("utf-8")
        )

    def discard(self) -> None:
        self._live = None

    async def drain(self) -> None:
        """Wait for every scheduled delivery to finish"""
        if self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    async def _deliver(self, email: str, code: str) -> None:
        try:
            await self.channel.send(email, code)
        except Exception as exc:
            logger.error(f"OTP dispatch to {email} failed: {exc}")
            return
        logger.info(f"OTP dispatched to {email}")
