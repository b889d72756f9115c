from typing import List, Optional, Set
from uuid import UUID

from sqlalchemy import or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.role_assignment_repository import IRoleAssignmentRepository
from src.domain.entities import AccountRole, TenantRoleGrant


class RoleAssignmentRepository(IRoleAssignmentRepository):
    """Direct assignments and tenant grants using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_account_role(self, assignment_id: UUID) -> Optional[AccountRole]:
        result = await self.session.exec(select(AccountRole).where(AccountRole.id == assignment_id))
        return result.one_or_none()

    async def find_account_role(
        self, account_id: UUID, role_id: UUID, tenant_id: Optional[UUID]
    ) -> Optional[AccountRole]:
        stmt = select(AccountRole).where(
            AccountRole.account_id == account_id, AccountRole.role_id == role_id
        )
        if tenant_id is None:
            stmt = stmt.where(AccountRole.tenant_id == None)
        else:
            stmt = stmt.where(AccountRole.tenant_id == tenant_id)
        result = await self.session.exec(stmt)
        return result.first()

    async def list_account_roles(self, account_id: UUID) -> List[AccountRole]:
        stmt = select(AccountRole).where(
            AccountRole.account_id == account_id, AccountRole.is_active == True
        )
        result = await self.session.exec(stmt.order_by(AccountRole.assigned_at))
        return list(result.all())

    async def save_account_role(self, assignment: AccountRole) -> AccountRole:
        self.session.add(assignment)
        await self.session.flush()
        await self.session.refresh(assignment)
        return assignment

    async def get_tenant_grant(self, grant_id: UUID) -> Optional[TenantRoleGrant]:
        result = await self.session.exec(select(TenantRoleGrant).where(TenantRoleGrant.id == grant_id))
        return result.one_or_none()

    async def find_tenant_grant(self, tenant_id: UUID, role_id: UUID) -> Optional[TenantRoleGrant]:
        stmt = select(TenantRoleGrant).where(
            TenantRoleGrant.tenant_id == tenant_id, TenantRoleGrant.role_id == role_id
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def save_tenant_grant(self, grant: TenantRoleGrant) -> TenantRoleGrant:
        self.session.add(grant)
        await self.session.flush()
        await self.session.refresh(grant)
        return grant

    async def active_role_ids(self, account_id: UUID, tenant_id: Optional[UUID]) -> Set[UUID]:
        direct = select(AccountRole.role_id).where(
            AccountRole.account_id == account_id, AccountRole.is_active == True
        )
        if tenant_id is None:
            direct = direct.where(AccountRole.tenant_id == None)
        else:
            direct = direct.where(
                or_(AccountRole.tenant_id == None, AccountRole.tenant_id == tenant_id)
            )
        role_ids = set((await self.session.exec(direct)).all())

        if tenant_id is not None:
            granted = select(TenantRoleGrant.role_id).where(
                TenantRoleGrant.tenant_id == tenant_id, TenantRoleGrant.is_active == True
            )
            role_ids.update((await self.session.exec(granted)).all())

        return role_ids
