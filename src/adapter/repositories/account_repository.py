from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.account_repository import IAccountRepository
from src.app.repositories.errors import StoreError
from src.domain.entities import Account


class AccountRepository(IAccountRepository):
    """Account repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get the earliest account with this exact email"""
        stmt = (
            select(Account)
            .where(Account.email == email)
            .order_by(Account.created_at)
            .limit(1)
        )
        try:
            result = await self.session.exec(stmt)
            return result.first()
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Get account by ID"""
        stmt = select(Account).where(Account.id == account_id)
        try:
            result = await self.session.exec(stmt)
            return result.one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    async def create(self, account: Account) -> Account:
        """Create a new account"""
        return await self._save(account)

    async def update(self, account: Account) -> Account:
        """Update existing account"""
        return await self._save(account)

    async def _save(self, account: Account) -> Account:
        try:
            self.session.add(account)
            await self.session.flush()
            await self.session.refresh(account)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        return account
