from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.impersonation_repository import IImpersonationRepository
from src.domain.entities import ImpersonationSession, ImpersonationStatus


class ImpersonationRepository(IImpersonationRepository):
    """ImpersonationSession repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, impersonation_id: UUID) -> Optional[ImpersonationSession]:
        stmt = select(ImpersonationSession).where(ImpersonationSession.id == impersonation_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_active_by_admin(self, admin_id: UUID) -> Optional[ImpersonationSession]:
        stmt = select(ImpersonationSession).where(
            ImpersonationSession.admin_id == admin_id,
            ImpersonationSession.status == ImpersonationStatus.active,
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list_active_by_tenant(self, tenant_id: UUID) -> List[ImpersonationSession]:
        stmt = select(ImpersonationSession).where(
            ImpersonationSession.tenant_id == tenant_id,
            ImpersonationSession.status == ImpersonationStatus.active,
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_stale(self, now: datetime) -> List[ImpersonationSession]:
        stmt = select(ImpersonationSession).where(
            ImpersonationSession.status == ImpersonationStatus.active,
            ImpersonationSession.expires_at <= now,
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, impersonation: ImpersonationSession) -> ImpersonationSession:
        self.session.add(impersonation)
        await self.session.flush()
        await self.session.refresh(impersonation)
        return impersonation

    async def update(self, impersonation: ImpersonationSession) -> ImpersonationSession:
        self.session.add(impersonation)
        await self.session.flush()
        await self.session.refresh(impersonation)
        return impersonation
