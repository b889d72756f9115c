"""
Use Case: Suspend Tenant

Billing integration endpoint to suspend a tenant for non-payment.
Revokes all active sessions and ends impersonations of the tenant.
"""

import logging
from typing import List
from uuid import UUID

from pydantic import BaseModel

from src.app.services.audit_logger import AuditLogger
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditAction, AuditCategory, ImpersonationStatus, TenantStatus
from src.libs.result import Error, Result, Return
from src.app.use_cases.impersonation.dtos import format_duration

logger = logging.getLogger(__name__)


class SuspendTenantResponse(BaseModel):
    """Response DTO for SuspendTenantUseCase"""

    status: str
    sessions_revoked: int
    impersonations_ended: int
    warnings: List[str] = []


class SuspendTenantUseCase:
    """
    Suspend a tenant for non-payment (billing integration).

    Business Logic:
    1. Validate tenant exists
    2. Update tenant status to suspended
    3. Revoke all active sessions scoped to this tenant
    4. End every active impersonation of this tenant
    5. Create audit events
    6. Return number of sessions revoked

    Idempotent: Suspending already-suspended tenant succeeds but revokes 0 sessions
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, tenant_id: UUID) -> Result[SuspendTenantResponse]:
        """
        Execute suspend tenant use case.

        Args:
            tenant_id: UUID of tenant to suspend

        Returns:
            Result[SuspendTenantResponse] with status and counts, or NOT_FOUND
        """
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("NOT_FOUND", "Tenant not found"))

            now = utcnow()
            tenant.status = TenantStatus.suspended
            await self.uow.tenants.update(tenant)

            sessions_revoked = await SessionRegistry(self.uow).revoke_tenant(tenant_id, now)

            audit = AuditLogger(self.uow)
            impersonations = await self.uow.impersonations.list_active_by_tenant(tenant_id)
            for impersonation in impersonations:
                impersonation.status = ImpersonationStatus.ended
                impersonation.ended_at = now
                await self.uow.impersonations.update(impersonation)
                await audit.record(
                    AuditCategory.impersonation,
                    AuditAction.stopped,
                    actor_id=impersonation.admin_id,
                    tenant_id=tenant_id,
                    metadata={
                        "impersonation_id": str(impersonation.id),
                        "duration": format_duration(now - impersonation.started_at),
                        "reason": "tenant_suspended",
                    },
                )

            await audit.record(
                AuditCategory.tenant,
                AuditAction.suspended,
                tenant_id=tenant_id,
                metadata={
                    "sessions_revoked": sessions_revoked,
                    "impersonations_ended": len(impersonations),
                },
            )

            await self.uow.commit()
            logger.info(
                "Tenant %s suspended: %d session(s) revoked", tenant_id, sessions_revoked
            )

            return Return.ok(
                SuspendTenantResponse(
                    status="suspended",
                    sessions_revoked=sessions_revoked,
                    impersonations_ended=len(impersonations),
                    warnings=audit.warnings,
                )
            )
