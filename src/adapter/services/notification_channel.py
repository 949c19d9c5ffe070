import logging

import httpx

from src.app.services.notification_channel import INotificationChannel

logger = logging.getLogger(__name__)


class HttpNotificationChannel(INotificationChannel):
    """Posts {to_email, otp} as JSON to a mail-sending webhook"""

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    async def send(self, target_email: str, code: str) -> None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.url, json={"to_email": target_email, "otp": code}
            )
        # One-way delivery: the body is ignored, only odd statuses are noted
        if response.is_error:
            logger.warning(f"OTP webhook answered {response.status_code} for {target_email}")


class LogNotificationChannel(INotificationChannel):
    """Development channel: writes the code to the log instead of emailing it"""

    async def send(self, target_email: str, code: str) -> None:
        logger.warning(f"OTP webhook not configured; code for {target_email} is {code}")
