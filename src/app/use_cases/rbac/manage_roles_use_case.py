"""
Manage Roles Use Case

Create, rename, delete and re-permission custom roles.
"""

from typing import Iterable, List, Optional, Set
from uuid import UUID

from src.app.services.audit_logger import AuditLogger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, AuditCategory, Role, SystemRole
from src.libs.result import Error, Result, Return
from .dtos import RoleResponse

SYSTEM_ROLE_IMMUTABLE = Error("CONFLICT", "System roles cannot be modified")


class ManageRolesUseCase:
    """
    Use case for role management.

    Business Rules:
    - System roles cannot be renamed, deleted or re-permissioned
    - Role names are unique within their scope, and a tenant role cannot
      shadow a global role name
    - A role referenced by an active assignment or grant cannot be deleted
    - Permission lists must name existing permissions (NOT_FOUND otherwise)
    - Every change is audit-logged under rbac
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def list_roles(self, tenant_id: Optional[UUID] = None) -> Result[List[RoleResponse]]:
        async with self.uow:
            roles = await self.uow.roles.list_visible(tenant_id)
            responses = []
            for role in roles:
                permissions = await self.uow.roles.get_permissions(role.id)
                responses.append(RoleResponse.from_entity(role, permissions))
            return Return.ok(responses)

    async def get_role(self, role_id: UUID) -> Result[RoleResponse]:
        async with self.uow:
            role = await self.uow.roles.get_by_id(role_id)
            if role is None:
                return Return.err(Error("NOT_FOUND", "Role not found"))
            permissions = await self.uow.roles.get_permissions(role.id)
            return Return.ok(RoleResponse.from_entity(role, permissions))

    async def create_role(
        self,
        name: str,
        actor_id: UUID,
        description: Optional[str] = None,
        level: int = 10,
        tenant_id: Optional[UUID] = None,
        permission_names: Iterable[str] = (),
    ) -> Result[RoleResponse]:
        """
        Create a custom role.

        Args:
            name: Role name, unique in scope
            actor_id: Account performing the change
            tenant_id: Owning tenant, or None for a global role
            permission_names: Initial permissions

        Returns:
            Result with RoleResponse, or CONFLICT / NOT_FOUND / VALIDATION_ERROR
        """
        if not name or not name.strip():
            return Return.err(Error("VALIDATION_ERROR", "Role name is required"))
        name = name.strip()

        async with self.uow:
            if tenant_id is not None and await self.uow.tenants.get_by_id(tenant_id) is None:
                return Return.err(Error("NOT_FOUND", "Tenant not found"))

            if await self._name_taken(name, tenant_id):
                return Return.err(Error("CONFLICT", f"Role {name} already exists"))

            permission_ids = await self._permission_ids(permission_names)
            if permission_ids is None:
                return Return.err(Error("NOT_FOUND", "Unknown permission in list"))

            role = Role(
                name=name,
                description=description,
                level=level,
                is_system=False,
                is_global=tenant_id is None,
                tenant_id=tenant_id,
            )
            await self.uow.roles.create(role)
            await self.uow.roles.set_permissions(role.id, permission_ids)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.rbac,
                AuditAction.created,
                actor_id=actor_id,
                tenant_id=tenant_id,
                metadata={"role_id": str(role.id), "name": role.name},
            )

            await self.uow.commit()

            permissions = await self.uow.roles.get_permissions(role.id)
            return Return.ok(RoleResponse.from_entity(role, permissions, audit.warnings))

    async def rename_role(
        self,
        role_id: UUID,
        actor_id: UUID,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Result[RoleResponse]:
        async with self.uow:
            role = await self.uow.roles.get_by_id(role_id)
            if role is None:
                return Return.err(Error("NOT_FOUND", "Role not found"))
            if role.is_system:
                return Return.err(SYSTEM_ROLE_IMMUTABLE)

            previous_name = role.name
            if name is not None and name.strip() and name.strip().lower() != role.name.lower():
                if await self._name_taken(name.strip(), role.tenant_id):
                    return Return.err(Error("CONFLICT", f"Role {name.strip()} already exists"))
                role.name = name.strip()
            if description is not None:
                role.description = description
            await self.uow.roles.update(role)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.rbac,
                AuditAction.updated,
                actor_id=actor_id,
                tenant_id=role.tenant_id,
                metadata={"role_id": str(role.id), "from": previous_name, "to": role.name},
            )

            await self.uow.commit()

            permissions = await self.uow.roles.get_permissions(role.id)
            return Return.ok(RoleResponse.from_entity(role, permissions, audit.warnings))

    async def delete_role(self, role_id: UUID, actor_id: UUID) -> Result[dict]:
        async with self.uow:
            role = await self.uow.roles.get_by_id(role_id)
            if role is None:
                return Return.err(Error("NOT_FOUND", "Role not found"))
            if role.is_system:
                return Return.err(SYSTEM_ROLE_IMMUTABLE)
            if await self.uow.roles.is_in_use(role.id):
                return Return.err(Error("CONFLICT", "Role is assigned and cannot be deleted"))

            name, tenant_id = role.name, role.tenant_id
            await self.uow.roles.delete(role)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.rbac,
                AuditAction.deleted,
                actor_id=actor_id,
                tenant_id=tenant_id,
                metadata={"role_id": str(role_id), "name": name},
            )

            await self.uow.commit()

            return Return.ok({"deleted": True, "role_id": str(role_id), "warnings": audit.warnings})

    async def set_role_permissions(
        self, role_id: UUID, permission_names: Iterable[str], actor_id: UUID
    ) -> Result[RoleResponse]:
        """Replace a custom role's permission set"""
        async with self.uow:
            role = await self.uow.roles.get_by_id(role_id)
            if role is None:
                return Return.err(Error("NOT_FOUND", "Role not found"))
            if role.is_system:
                return Return.err(SYSTEM_ROLE_IMMUTABLE)

            permission_ids = await self._permission_ids(permission_names)
            if permission_ids is None:
                return Return.err(Error("NOT_FOUND", "Unknown permission in list"))

            await self.uow.roles.set_permissions(role.id, permission_ids)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.rbac,
                AuditAction.updated,
                actor_id=actor_id,
                tenant_id=role.tenant_id,
                metadata={"role_id": str(role.id), "permission_count": len(permission_ids)},
            )

            await self.uow.commit()

            permissions = await self.uow.roles.get_permissions(role.id)
            return Return.ok(RoleResponse.from_entity(role, permissions, audit.warnings))

    async def _name_taken(self, name: str, tenant_id: Optional[UUID]) -> bool:
        if name.lower() in {r.value for r in SystemRole}:
            return True
        if await self.uow.roles.get_by_name(name) is not None:
            return True
        if tenant_id is not None:
            return await self.uow.roles.get_by_name(name, tenant_id) is not None
        return False

    async def _permission_ids(self, names: Iterable[str]) -> Optional[Set[UUID]]:
        ids = set()
        for name in set(names):
            permission = await self.uow.permissions.get_by_name(name)
            if permission is None:
                return None
            ids.add(permission.id)
        return ids
