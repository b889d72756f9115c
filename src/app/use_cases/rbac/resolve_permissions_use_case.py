"""
Resolve Permissions Use Case
"""

from typing import Optional
from uuid import UUID

from src.app.services.permission_resolver import PermissionResolver
from src.app.services.unit_of_work import UnitOfWork
from src.libs.result import Error, Result, Return
from .dtos import ResolvedPermissionsResponse


class ResolvePermissionsUseCase:
    """Effective permissions of an account in a tenant context (read-only)"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, account_id: UUID, tenant_id: Optional[UUID] = None
    ) -> Result[ResolvedPermissionsResponse]:
        async with self.uow:
            if await self.uow.accounts.get_by_id(account_id) is None:
                return Return.err(Error("NOT_FOUND", "Account not found"))

            permissions = await PermissionResolver(self.uow).resolve(account_id, tenant_id)

            return Return.ok(
                ResolvedPermissionsResponse(
                    account_id=str(account_id),
                    tenant_id=str(tenant_id) if tenant_id else None,
                    permissions=sorted(permissions),
                )
            )
