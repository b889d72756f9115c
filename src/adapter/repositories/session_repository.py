from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Account, Session, SessionStatus


def _last_activity():
    return func.coalesce(Session.last_used_at, Session.created_at)


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_refresh_token_hash(self, token_hash: str) -> Optional[Session]:
        """
        Find session by refresh token digest.

        Status and expiry are checked by the caller so revoked tokens can be
        told apart from unknown ones.
        """
        stmt = select(Session).where(Session.refresh_token_hash == token_hash)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_active_by_account(
        self, account_id: UUID, now: datetime, active_since: Optional[datetime] = None
    ) -> List[Session]:
        """Active sessions of an account, newest first"""
        stmt = select(Session).where(
            Session.account_id == account_id,
            Session.status == SessionStatus.active,
            Session.expires_at > now,
        )
        if active_since is not None:
            stmt = stmt.where(_last_activity() > active_since)
        stmt = stmt.order_by(Session.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_active(
        self, account_id: UUID, now: datetime, active_since: Optional[datetime] = None
    ) -> int:
        """Count active, unexpired sessions"""
        stmt = (
            select(func.count())
            .select_from(Session)
            .where(
                Session.account_id == account_id,
                Session.status == SessionStatus.active,
                Session.expires_at > now,
            )
        )
        if active_since is not None:
            stmt = stmt.where(_last_activity() > active_since)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def rotate_refresh_token(
        self,
        session_id: UUID,
        old_hash: str,
        new_hash: str,
        expires_at: datetime,
        now: datetime,
    ) -> bool:
        """Compare-and-swap the refresh token digest"""
        stmt = (
            update(Session)
            .where(
                Session.id == session_id,
                Session.refresh_token_hash == old_hash,
                Session.status == SessionStatus.active,
                Session.expires_at > now,
            )
            .values(refresh_token_hash=new_hash, expires_at=expires_at, last_used_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def touch(self, session_id: UUID, now: datetime) -> bool:
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.status == SessionStatus.active)
            .values(last_used_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def revoke_by_id(self, session_id: UUID, now: datetime) -> bool:
        """Revoke a specific session by ID"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.status == SessionStatus.active)
            .values(status=SessionStatus.revoked, revoked_at=now, expires_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_all_by_account(
        self, account_id: UUID, now: datetime, keep_session_id: Optional[UUID] = None
    ) -> int:
        """Revoke all active sessions for an account"""
        stmt = update(Session).where(
            Session.account_id == account_id,
            Session.status == SessionStatus.active,
        )
        if keep_session_id is not None:
            stmt = stmt.where(Session.id != keep_session_id)
        stmt = stmt.values(
            status=SessionStatus.revoked, revoked_at=now, expires_at=now
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_all_by_tenant(self, tenant_id: UUID, now: datetime) -> int:
        """Revoke all active sessions scoped to a tenant"""
        stmt = (
            update(Session)
            .where(Session.tenant_id == tenant_id, Session.status == SessionStatus.active)
            .values(status=SessionStatus.revoked, revoked_at=now, expires_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_all(self, now: datetime) -> int:
        """Revoke every active session"""
        stmt = (
            update(Session)
            .where(Session.status == SessionStatus.active)
            .values(status=SessionStatus.revoked, revoked_at=now, expires_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def list_stale(self, now: datetime) -> List[Session]:
        """Sessions marked active past their expiry"""
        stmt = select(Session).where(
            Session.status == SessionStatus.active, Session.expires_at <= now
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_idle_candidates(
        self, now: datetime, since: datetime
    ) -> List[Tuple[Session, Account]]:
        stmt = (
            select(Session, Account)
            .join(Account, Account.id == Session.account_id)
            .where(
                Session.status == SessionStatus.active,
                Session.expires_at > now,
                _last_activity() <= since,
            )
        )
        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def mark_expired(self, session_ids: List[UUID]) -> int:
        """Move the given active sessions to expired"""
        if not session_ids:
            return 0
        stmt = (
            update(Session)
            .where(Session.id.in_(session_ids), Session.status == SessionStatus.active)
            .values(status=SessionStatus.expired)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
