"""
Session Stores

Single-slot key-value storage for the client session.
"""

import json
import logging
import os
import tempfile
from typing import Any, Dict, Optional

from src.app.repositories.session_store import ISessionStore

logger = logging.getLogger(__name__)


class JsonFileSessionStore(ISessionStore):
    """
    Keeps a JSON object on disk acting as the client's durable key-value
    area; the session lives under one well-known key.
    """

    def __init__(self, path: str, key: str):
        self.path = path
        self.key = key

    def read(self) -> Optional[Dict[str, Any]]:
        return self._load().get(self.key)

    def write(self, payload: Dict[str, Any]) -> None:
        area = self._load()
        area[self.key] = payload
        self._dump(area)

    def clear(self) -> None:
        area = self._load()
        if self.key not in area:
            return
        del area[self.key]
        self._dump(area)

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as r_file:
                area = json.load(r_file)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning(f"Ignoring corrupt storage file {self.path}: {exc}")
            return {}
        return area if isinstance(area, dict) else {}

    def _dump(self, area: Dict[str, Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".session-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as w_file:
                json.dump(area, w_file)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class InMemorySessionStore(ISessionStore):
    """Process-local slot; lost on restart"""

    def __init__(self):
        self._payload: Optional[Dict[str, Any]] = None

    def read(self) -> Optional[Dict[str, Any]]:
        return self._payload

    def write(self, payload: Dict[str, Any]) -> None:
        self._payload = payload

    def clear(self) -> None:
        self._payload = None
