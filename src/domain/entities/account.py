"""
Account Entity

Identity record for a renter, keyed logically by email.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from .enums import AccountRole


class Account(SQLModel, table=True):
    """
    Account entity - one person who can log in to the marketplace.

    Business Rules:
    - Email is the logical key, compared case-sensitively as submitted
    - Email is indexed but NOT unique at the store level
    - credential_secret holds whatever the configured credential scheme
      produces (bcrypt hash, or the literal secret for the plain scheme)
    - Never deleted by the authentication flow
    """

    __tablename__ = "accounts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(index=True, max_length=255)
    credential_secret: str = Field(max_length=255)
    role: AccountRole = Field(default=AccountRole.user)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), sa_column=Column(DateTime)
    )
