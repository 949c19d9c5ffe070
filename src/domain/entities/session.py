"""
Session Record

Client-held proof of authentication, stored in one well-known slot.
"""

from datetime import UTC, datetime
from typing import Any, Dict
from uuid import UUID

from pydantic import BaseModel

from .account import Account
from .enums import AccountRole


class AccountSnapshot(BaseModel):
    """Copy of an Account taken at session issuance, never re-fetched"""

    id: UUID
    email: str
    credential_secret: str
    role: AccountRole
    created_at: datetime

    @classmethod
    def from_account(cls, account: Account) -> "AccountSnapshot":
        return cls(
            id=account.id,
            email=account.email,
            credential_secret=account.credential_secret,
            role=account.role,
            created_at=account.created_at,
        )


def _to_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _from_millis(millis: int) -> datetime:
    return datetime.fromtimestamp(millis / 1000, tz=UTC)


class SessionRecord(BaseModel):
    """
    Session - one per client.

    Business Rules:
    - expires_at = issued_at + 7 days when remembered, else + 1 day
    - Expired records are purged lazily on first read past expires_at
    """

    account: AccountSnapshot
    issued_at: datetime
    expires_at: datetime
    remember: bool = False

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def to_storage(self) -> Dict[str, Any]:
        """Serialize to the JSON payload kept in the session slot"""
        return {
            "account": self.account.model_dump(mode="json"),
            "issuedAtEpochMillis": _to_millis(self.issued_at),
            "expiresAtEpochMillis": _to_millis(self.expires_at),
            "remember": self.remember,
        }

    @classmethod
    def from_storage(cls, payload: Dict[str, Any]) -> "SessionRecord":
        expires_at = _from_millis(payload["expiresAtEpochMillis"])
        issued_millis = payload.get("issuedAtEpochMillis")
        return cls(
            account=AccountSnapshot.model_validate(payload["account"]),
            issued_at=_from_millis(issued_millis) if issued_millis is not None else expires_at,
            expires_at=expires_at,
            remember=bool(payload.get("remember", False)),
        )
