from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class ISessionStore(ABC):
    """
    Durable client-side slot holding at most one session payload.

    Implementations are synchronous local reads/writes; no network.
    """

    @abstractmethod
    def read(self) -> Optional[Dict[str, Any]]:
        """Return the stored payload, or None when the slot is empty"""
        pass

    @abstractmethod
    def write(self, payload: Dict[str, Any]) -> None:
        """Replace the slot contents"""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Empty the slot; no-op when already empty"""
        pass
