"""
Use Case: Restore Tenant

Called by billing once a suspended tenant has paid.
"""

import logging
from typing import List
from uuid import UUID

from pydantic import BaseModel

from src.app.services.audit_logger import AuditLogger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, AuditCategory, TenantStatus
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class RestoreTenantResponse(BaseModel):
    status: str
    previous_status: str
    warnings: List[str] = []


class RestoreTenantUseCase:
    """
    Reactivates the tenant so its accounts can log in again. Sessions revoked
    by the suspension stay revoked; staff start fresh ones.

    Restoring a tenant that is already active is a no-op and writes no audit event.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, tenant_id: UUID) -> Result[RestoreTenantResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("NOT_FOUND", "Tenant not found"))

            previous = tenant.status
            if previous == TenantStatus.active:
                return Return.ok(RestoreTenantResponse(status="active", previous_status="active"))

            tenant.status = TenantStatus.active
            await self.uow.tenants.update(tenant)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.tenant,
                AuditAction.restored,
                tenant_id=tenant_id,
                metadata={"previous_status": previous.value},
            )

            await self.uow.commit()
            logger.info("Tenant %s restored from %s", tenant_id, previous.value)

            return Return.ok(
                RestoreTenantResponse(
                    status="active", previous_status=previous.value, warnings=audit.warnings
                )
            )
