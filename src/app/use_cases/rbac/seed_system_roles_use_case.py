"""
Seed System Roles Use Case

Makes the database catalog match the built-in role mapping.
"""

import logging

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Permission, Role, SystemRole
from src.domain.rbac import PERMISSION_CATALOG, SYSTEM_ROLE_PERMISSIONS
from src.libs.result import Result, Return
from .dtos import SeedResponse

logger = logging.getLogger(__name__)


class SeedSystemRolesUseCase:
    """
    Business Rules:
    - Idempotent: running again creates nothing new
    - Every catalog permission exists as a system permission
    - Every SystemRole exists as a global system role whose permission
      joins equal its entry in the mapping table
    - Custom roles and permissions are left alone
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[SeedResponse]:
        async with self.uow:
            permission_ids = {}
            permissions_created = 0
            for code, definition in PERMISSION_CATALOG.items():
                permission = await self.uow.permissions.get_by_name(code.value)
                if permission is None:
                    permission = Permission(
                        name=code.value,
                        description=definition.description,
                        category=definition.category,
                        risk_level=definition.risk_level,
                        is_system=True,
                    )
                    await self.uow.permissions.create(permission)
                    permissions_created += 1
                permission_ids[code.value] = permission.id

            roles_created = 0
            roles_synced = 0
            for role_name in SystemRole:
                role = await self.uow.roles.get_by_name(role_name.value)
                if role is None:
                    role = Role(
                        name=role_name.value,
                        description=role_name.value.replace("_", " ").title(),
                        level=role_name.level,
                        is_system=True,
                        is_global=True,
                    )
                    await self.uow.roles.create(role)
                    roles_created += 1

                wanted = {permission_ids[p.value] for p in SYSTEM_ROLE_PERMISSIONS[role_name]}
                current = {p.id for p in await self.uow.roles.get_permissions(role.id)}
                if wanted != current:
                    await self.uow.roles.set_permissions(role.id, wanted)
                    roles_synced += 1

            await self.uow.commit()

            if permissions_created or roles_created or roles_synced:
                logger.info(
                    "Seeded %d permission(s), %d role(s); synced %d role(s)",
                    permissions_created,
                    roles_created,
                    roles_synced,
                )

            return Return.ok(
                SeedResponse(
                    permissions_created=permissions_created,
                    roles_created=roles_created,
                    roles_synced=roles_synced,
                )
            )
