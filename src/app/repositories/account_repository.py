from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import Account


class IAccountRepository(ABC):
    """Account repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get account by email (case-insensitive)"""
        pass

    @abstractmethod
    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Get account by ID"""
        pass

    @abstractmethod
    async def create(self, account: Account) -> Account:
        """Create a new account"""
        pass

    @abstractmethod
    async def update(self, account: Account) -> Account:
        """Update existing account"""
        pass

    @abstractmethod
    async def lock(self, account_id: UUID) -> bool:
        """
        Take the account's write lock for the rest of the transaction.

        Must be the first write of the transaction. Any other transaction
        calling lock() for the same account blocks until this one ends.

        Returns:
            False if the account does not exist
        """
        pass

    @abstractmethod
    async def shortest_inactivity_timeout(self) -> Optional[int]:
        """Smallest per-account idle timeout override in minutes, None if no account sets one"""
        pass
