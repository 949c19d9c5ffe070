"""
Session Manager

Issues, validates and terminates the single client-side session.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Callable, Optional, Union

from pydantic import ValidationError

from src.app.repositories.session_store import ISessionStore
from src.domain.entities import Account, AccountSnapshot, SessionRecord

logger = logging.getLogger(__name__)

SESSION_TTL = timedelta(days=1)
REMEMBERED_SESSION_TTL = timedelta(days=7)


class SessionManager:
    """
    Business Rules:
    - One slot per client; issuing replaces whatever was there
    - TTL is 7 days with remember, 1 day without
    - validate() never contacts the account store; it trusts the local
      clock against the stored expiry
    - Expired or unreadable records are purged on read
    """

    def __init__(
        self,
        store: ISessionStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.clock = clock or (lambda: datetime.now(UTC))

    def issue(self, account: Union[Account, AccountSnapshot], remember: bool = False) -> SessionRecord:
        if isinstance(account, AccountSnapshot):
            snapshot = account.model_copy()
        else:
            snapshot = AccountSnapshot.from_account(account)

        issued_at = self.clock()
        ttl = REMEMBERED_SESSION_TTL if remember else SESSION_TTL
        session = SessionRecord(
            account=snapshot,
            issued_at=issued_at,
            expires_at=issued_at + ttl,
            remember=remember,
        )
        self.store.write(session.to_storage())
        logger.info(f"Session issued for {snapshot.id}, expires {session.expires_at.isoformat()}")
        return session

    def validate(self) -> Optional[SessionRecord]:
        payload = self.store.read()
        if payload is None:
            return None

        try:
            session = SessionRecord.from_storage(payload)
        except (
            KeyError, TypeError, ValueError, OverflowError, OSError, ValidationError
        ) as exc:
            logger.warning(f"Discarding unreadable session record: {exc}")
            self.store.clear()
            return None

        if session.is_expired(self.clock()):
            logger.info(f"Session for {session.account.id} expired, purging")
            self.store.clear()
            return None

        return session

    def terminate(self) -> None:
        self.store.clear()
