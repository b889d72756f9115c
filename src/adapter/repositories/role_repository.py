from typing import List, Optional, Set
from uuid import UUID

from sqlalchemy import delete, func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.role_repository import IPermissionRepository, IRoleRepository
from src.domain.base import utcnow
from src.domain.entities import (
    AccountRole,
    Permission,
    Role,
    RolePermission,
    TenantRoleGrant,
)


class RoleRepository(IRoleRepository):
    """Role repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, role_id: UUID) -> Optional[Role]:
        stmt = select(Role).where(Role.id == role_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_name(self, name: str, tenant_id: Optional[UUID] = None) -> Optional[Role]:
        stmt = select(Role).where(func.lower(Role.name) == name.strip().lower())
        if tenant_id is None:
            stmt = stmt.where(Role.tenant_id == None)
        else:
            stmt = stmt.where(Role.tenant_id == tenant_id)
        result = await self.session.exec(stmt)
        return result.first()

    async def list_visible(self, tenant_id: Optional[UUID] = None) -> List[Role]:
        stmt = select(Role)
        if tenant_id is None:
            stmt = stmt.where(Role.tenant_id == None)
        else:
            stmt = stmt.where(or_(Role.tenant_id == None, Role.tenant_id == tenant_id))
        result = await self.session.exec(stmt.order_by(Role.level, Role.name))
        return list(result.all())

    async def create(self, role: Role) -> Role:
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def update(self, role: Role) -> Role:
        role.updated_at = utcnow()
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def delete(self, role: Role) -> None:
        """Delete a role with its joins and withdrawn assignment rows"""
        await self.session.execute(delete(RolePermission).where(RolePermission.role_id == role.id))
        await self.session.execute(delete(AccountRole).where(AccountRole.role_id == role.id))
        await self.session.execute(delete(TenantRoleGrant).where(TenantRoleGrant.role_id == role.id))
        await self.session.delete(role)
        await self.session.flush()

    async def is_in_use(self, role_id: UUID) -> bool:
        assigned = await self.session.exec(
            select(AccountRole.id)
            .where(AccountRole.role_id == role_id, AccountRole.is_active == True)
            .limit(1)
        )
        if assigned.first() is not None:
            return True
        granted = await self.session.exec(
            select(TenantRoleGrant.id)
            .where(TenantRoleGrant.role_id == role_id, TenantRoleGrant.is_active == True)
            .limit(1)
        )
        return granted.first() is not None

    async def get_permissions(self, role_id: UUID) -> List[Permission]:
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .order_by(Permission.name)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def set_permissions(self, role_id: UUID, permission_ids: Set[UUID]) -> None:
        await self.session.execute(delete(RolePermission).where(RolePermission.role_id == role_id))
        for permission_id in permission_ids:
            self.session.add(RolePermission(role_id=role_id, permission_id=permission_id))
        await self.session.flush()


class PermissionRepository(IPermissionRepository):
    """Permission repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, permission_id: UUID) -> Optional[Permission]:
        stmt = select(Permission).where(Permission.id == permission_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_name(self, name: str) -> Optional[Permission]:
        stmt = select(Permission).where(Permission.name == name.strip().lower())
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list_all(self) -> List[Permission]:
        result = await self.session.exec(select(Permission).order_by(Permission.category, Permission.name))
        return list(result.all())

    async def create(self, permission: Permission) -> Permission:
        self.session.add(permission)
        await self.session.flush()
        await self.session.refresh(permission)
        return permission

    async def delete(self, permission: Permission) -> None:
        await self.session.delete(permission)
        await self.session.flush()

    async def is_in_use(self, permission_id: UUID) -> bool:
        result = await self.session.exec(
            select(RolePermission.id).where(RolePermission.permission_id == permission_id).limit(1)
        )
        return result.first() is not None

    async def names_for_roles(self, role_ids: Set[UUID]) -> Set[str]:
        if not role_ids:
            return set()
        stmt = (
            select(Permission.name)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id.in_(role_ids))
            .distinct()
        )
        result = await self.session.exec(stmt)
        return set(result.all())
