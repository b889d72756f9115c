from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.account_repository import IAccountRepository
from src.domain.entities import Account


class AccountRepository(IAccountRepository):
    """Account repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get account by email address, ignoring case"""
        stmt = select(Account).where(func.lower(Account.email) == email.strip().lower())
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Get account by ID"""
        stmt = select(Account).where(Account.id == account_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, account: Account) -> Account:
        """Create a new account"""
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def update(self, account: Account) -> Account:
        """Update existing account"""
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def lock(self, account_id: UUID) -> bool:
        """
        Bump session_guard on the account row.

        On PostgreSQL the UPDATE holds the row lock until commit/rollback.
        On SQLite it opens the write transaction and holds the database
        RESERVED lock, so competing writers wait on the busy timeout.
        Either way the caller's count-then-insert runs alone per account.
        """
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(session_guard=Account.session_guard + 1)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def shortest_inactivity_timeout(self) -> Optional[int]:
        stmt = select(func.min(Account.inactivity_timeout_minutes)).where(
            Account.inactivity_timeout_minutes > 0
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
