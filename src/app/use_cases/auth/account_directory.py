"""
Account Directory

Looks up, creates and updates account records keyed by email.
"""

import logging
from typing import Callable, Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.repositories.errors import StoreError
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Account, AccountRole

logger = logging.getLogger(__name__)

LOOKUP_FAILED_MESSAGE = "Network error. Please try again."
SAVE_FAILED_MESSAGE = "Failed to save account."


class AccountDirectory:
    """
    Sole owner of account persistence for the authentication flow.

    Business Rules:
    - A missing account is a normal result (ok(None)), not an error
    - Store failures surface as STORE_ERROR, never as exceptions
    - No duplicate-email guard at the store layer; when duplicates exist
      the earliest-created account wins
    - Every call runs in its own unit of work
    """

    def __init__(self, uow_factory: Callable[[], UnitOfWork]):
        self.uow_factory = uow_factory

    async def find_by_email(self, email: str) -> Result[Optional[Account]]:
        try:
            async with self.uow_factory() as uow:
                account = await uow.accounts.get_by_email(email)
        except StoreError as exc:
            logger.error(f"Account lookup failed for {email}: {exc}")
            return Return.err(Error("STORE_ERROR", LOOKUP_FAILED_MESSAGE))
        return Return.ok(account)

    async def create_account(self, email: str, credential_secret: str) -> Result[Account]:
        """
        Insert a new account with role=user.

        Args:
            email: Email exactly as submitted
            credential_secret: Value produced by the credential scheme

        Returns:
            Result with the stored Account (id and created_at assigned), or Error
        """
        try:
            async with self.uow_factory() as uow:
                account = await uow.accounts.create(
                    Account(
                        email=email,
                        credential_secret=credential_secret,
                        role=AccountRole.user,
                    )
                )
                await uow.commit()
        except StoreError as exc:
            logger.error(f"Account creation failed for {email}: {exc}")
            return Return.err(Error("STORE_ERROR", SAVE_FAILED_MESSAGE))

        logger.info(f"Account created: {account.id}")
        return Return.ok(account)

    async def update_credential(self, account_id: UUID, new_secret: str) -> Result[Account]:
        """Replace the stored credential of an existing account in place"""
        try:
            async with self.uow_factory() as uow:
                account = await uow.accounts.get_by_id(account_id)
                if account is None:
                    raise StoreError(f"account {account_id} not found")

                account.credential_secret = new_secret
                account = await uow.accounts.update(account)
                await uow.commit()
        except StoreError as exc:
            logger.error(f"Credential update failed for {account_id}: {exc}")
            return Return.err(Error("STORE_ERROR", SAVE_FAILED_MESSAGE))

        logger.info(f"Credential updated: {account_id}")
        return Return.ok(account)
