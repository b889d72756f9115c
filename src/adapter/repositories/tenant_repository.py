from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.tenant_repository import ITenantRepository
from src.domain.entities import Tenant, TenantStatus


class TenantRepository(ITenantRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, tenant_id: UUID) -> Optional[Tenant]:
        result = await self.session.exec(select(Tenant).where(Tenant.id == tenant_id))
        return result.first()

    async def get_by_license_key(self, license_key: str) -> Optional[Tenant]:
        result = await self.session.exec(select(Tenant).where(Tenant.license_key == license_key))
        return result.first()

    async def list_all(self, status: Optional[TenantStatus] = None) -> List[Tenant]:
        stmt = select(Tenant).order_by(Tenant.name)
        if status is not None:
            stmt = stmt.where(Tenant.status == status)
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, tenant: Tenant) -> Tenant:
        self.session.add(tenant)
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant

    async def update(self, tenant: Tenant) -> Tenant:
        self.session.add(tenant)
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant
