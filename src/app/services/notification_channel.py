from abc import ABC, abstractmethod


class INotificationChannel(ABC):
    """Outbound one-way channel delivering a one-time code to an email address"""

    @abstractmethod
    async def send(self, target_email: str, code: str) -> None:
        """Deliver the code. Raises on transport failure; response is ignored."""
        pass
