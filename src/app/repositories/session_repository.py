from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import Account, Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def get_by_refresh_token_hash(self, token_hash: str) -> Optional[Session]:
        """Find session by the digest of its refresh token (any status)"""
        pass

    @abstractmethod
    async def list_active_by_account(
        self, account_id: UUID, now: datetime, active_since: Optional[datetime] = None
    ) -> List[Session]:
        """Active, unexpired sessions of an account used since active_since (if given), newest first"""
        pass

    @abstractmethod
    async def count_active(
        self, account_id: UUID, now: datetime, active_since: Optional[datetime] = None
    ) -> int:
        """Count active, unexpired sessions of an account used since active_since (if given)"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def rotate_refresh_token(
        self,
        session_id: UUID,
        old_hash: str,
        new_hash: str,
        expires_at: datetime,
        now: datetime,
    ) -> bool:
        """
        Swap the refresh token digest if the session still holds old_hash
        and is active and unexpired. Returns True when exactly one row moved.
        """
        pass

    @abstractmethod
    async def touch(self, session_id: UUID, now: datetime) -> bool:
        """Record use of an active session"""
        pass

    @abstractmethod
    async def revoke_by_id(self, session_id: UUID, now: datetime) -> bool:
        """Revoke one active session. Returns False if it was not active."""
        pass

    @abstractmethod
    async def revoke_all_by_account(
        self, account_id: UUID, now: datetime, keep_session_id: Optional[UUID] = None
    ) -> int:
        """Revoke every active session of an account, optionally keeping one"""
        pass

    @abstractmethod
    async def revoke_all_by_tenant(self, tenant_id: UUID, now: datetime) -> int:
        """Revoke every active session scoped to a tenant"""
        pass

    @abstractmethod
    async def revoke_all(self, now: datetime) -> int:
        """Revoke every active session platform-wide"""
        pass

    @abstractmethod
    async def list_stale(self, now: datetime) -> List[Session]:
        """Sessions still marked active whose expiry has passed"""
        pass

    @abstractmethod
    async def list_idle_candidates(
        self, now: datetime, since: datetime
    ) -> List[Tuple[Session, Account]]:
        """Active, unexpired sessions last used at or before `since`, with their accounts"""
        pass

    @abstractmethod
    async def mark_expired(self, session_ids: List[UUID]) -> int:
        """Move the given active sessions to expired"""
        pass
