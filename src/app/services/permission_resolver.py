"""
Permission Resolver

Expands an account's roles into a flat permission set.
"""

from typing import FrozenSet, Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SystemRole
from src.domain.rbac import permissions_for_role


class PermissionResolver:
    """
    Business Rules:
    - Roles come from active direct assignments (unscoped or scoped to the
      tenant) and active tenant-wide grants for the tenant
    - Permissions are the union over those roles' joins, de-duplicated
    - No assignments resolves to the empty set, not an error
    - Read-only
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def resolve(self, account_id: UUID, tenant_id: Optional[UUID]) -> FrozenSet[str]:
        role_ids = await self.uow.assignments.active_role_ids(account_id, tenant_id)
        if not role_ids:
            return frozenset()
        names = await self.uow.permissions.names_for_roles(role_ids)
        return frozenset(names)

    @staticmethod
    def resolve_for_role(role: SystemRole) -> FrozenSet[str]:
        """Permissions of a built-in role, straight from the mapping table"""
        return permissions_for_role(role)
