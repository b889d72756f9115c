"""
Manage Permissions Use Case
"""

import re
from typing import List, Optional
from uuid import UUID

from src.app.services.audit_logger import AuditLogger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, AuditCategory, Permission, RiskLevel
from src.libs.result import Error, Result, Return
from .dtos import PermissionResponse

PERMISSION_NAME = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)+$")


class ManagePermissionsUseCase:
    """
    Business Rules:
    - Names are dotted lowercase identifiers (sales.refund) and unique
    - System permissions cannot be deleted
    - A permission joined to any role cannot be deleted
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def list_permissions(self) -> Result[List[PermissionResponse]]:
        async with self.uow:
            permissions = await self.uow.permissions.list_all()
            return Return.ok([PermissionResponse.from_entity(p) for p in permissions])

    async def create_permission(
        self,
        name: str,
        actor_id: UUID,
        description: Optional[str] = None,
        category: str = "general",
        risk_level: str = RiskLevel.low.value,
    ) -> Result[PermissionResponse]:
        name = (name or "").strip().lower()
        if not PERMISSION_NAME.match(name):
            return Return.err(
                Error("VALIDATION_ERROR", "Permission name must look like resource.action")
            )
        try:
            risk = RiskLevel(risk_level)
        except ValueError:
            return Return.err(Error("VALIDATION_ERROR", f"Unknown risk level: {risk_level}"))

        async with self.uow:
            if await self.uow.permissions.get_by_name(name) is not None:
                return Return.err(Error("CONFLICT", f"Permission {name} already exists"))

            permission = Permission(
                name=name,
                description=description,
                category=category,
                risk_level=risk,
                is_system=False,
            )
            await self.uow.permissions.create(permission)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.rbac,
                AuditAction.created,
                actor_id=actor_id,
                metadata={"permission": name},
            )

            await self.uow.commit()

            return Return.ok(PermissionResponse.from_entity(permission))

    async def delete_permission(self, permission_id: UUID, actor_id: UUID) -> Result[dict]:
        async with self.uow:
            permission = await self.uow.permissions.get_by_id(permission_id)
            if permission is None:
                return Return.err(Error("NOT_FOUND", "Permission not found"))
            if permission.is_system:
                return Return.err(Error("CONFLICT", "System permissions cannot be deleted"))
            if await self.uow.permissions.is_in_use(permission.id):
                return Return.err(Error("CONFLICT", "Permission is used by a role"))

            name = permission.name
            await self.uow.permissions.delete(permission)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.rbac,
                AuditAction.deleted,
                actor_id=actor_id,
                metadata={"permission": name},
            )

            await self.uow.commit()

            return Return.ok({"deleted": True, "permission": name, "warnings": audit.warnings})
