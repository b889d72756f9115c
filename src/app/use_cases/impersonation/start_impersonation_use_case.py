"""
Start Impersonation Use Case

Lets a superadmin act inside a tenant with tenant admin rights.
"""

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from src.app.services.audit_logger import AuditLogger
from src.app.services.client_info import ClientInfo
from src.app.services.permission_resolver import PermissionResolver
from src.app.services.token_issuer import TokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import (
    AuditAction,
    AuditCategory,
    ImpersonationSession,
    ImpersonationStatus,
    SystemRole,
    TenantStatus,
)
from src.libs.result import Error, Result, Return
from .dtos import StartImpersonationResponse, format_duration

logger = logging.getLogger(__name__)


class StartImpersonationUseCase:
    """
    Use case for starting an impersonation session.

    Business Rules:
    - Target tenant must exist and be active (TENANT_NOT_ELIGIBLE otherwise)
    - At most one active impersonation per admin: a previous one is ended
      and audited as stopped before the new one is created
    - The admin's account row is locked first so two concurrent starts by
      the same admin run one after the other
    - Token acts as tenant_admin of the target tenant and lives at most 24h

    Business Logic:
    1. Check tenant eligibility
    2. Lock admin account row
    3. End any active impersonation of the admin (audit stopped)
    4. Create the new session row (audit started)
    5. Commit, then mint the impersonation token
    """

    def __init__(self, uow: UnitOfWork, tokens: TokenIssuer):
        self.uow = uow
        self.tokens = tokens

    async def execute(
        self,
        admin_id: UUID,
        tenant_id: UUID,
        reason: Optional[str],
        client: ClientInfo,
        duration: Optional[timedelta] = None,
    ) -> Result[StartImpersonationResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if tenant is None or tenant.status != TenantStatus.active:
                return Return.err(
                    Error("TENANT_NOT_ELIGIBLE", "Tenant does not exist or is not active")
                )

            admin = await self.uow.accounts.get_by_id(admin_id)
            if admin is None or not await self.uow.accounts.lock(admin_id):
                return Return.err(Error("NOT_FOUND", "Account not found"))

            now = utcnow()
            audit = AuditLogger(self.uow)

            previous = await self.uow.impersonations.get_active_by_admin(admin_id)
            if previous is not None:
                previous.status = ImpersonationStatus.ended
                previous.ended_at = now
                await self.uow.impersonations.update(previous)
                await audit.record(
                    AuditCategory.impersonation,
                    AuditAction.stopped,
                    actor_id=admin_id,
                    tenant_id=previous.tenant_id,
                    client=client,
                    metadata={
                        "impersonation_id": str(previous.id),
                        "duration": format_duration(now - previous.started_at),
                        "reason": "superseded",
                    },
                )
                logger.info(
                    "Impersonation %s by %s superseded", previous.id, admin_id
                )

            ttl = self.tokens.impersonation_ttl(duration)
            impersonation = ImpersonationSession(
                admin_id=admin_id,
                tenant_id=tenant.id,
                status=ImpersonationStatus.active,
                reason=reason,
                ip_address=client.ip_address,
                user_agent=client.truncated_user_agent(),
                started_at=now,
                expires_at=now + ttl,
            )
            await self.uow.impersonations.create(impersonation)

            await audit.record(
                AuditCategory.impersonation,
                AuditAction.started,
                actor_id=admin_id,
                tenant_id=tenant.id,
                client=client,
                metadata={
                    "impersonation_id": str(impersonation.id),
                    "tenant_name": tenant.name,
                    "reason": reason,
                },
            )

            await self.uow.commit()
            logger.info(
                "Impersonation %s started by %s in tenant %s", impersonation.id, admin_id, tenant.id
            )

            issued = self.tokens.issue_impersonation_token(
                admin,
                tenant.id,
                impersonation.id,
                PermissionResolver.resolve_for_role(SystemRole.tenant_admin),
                duration=ttl,
                now=now,
            )

            return Return.ok(
                StartImpersonationResponse(
                    access_token=issued.token,
                    impersonation_id=str(impersonation.id),
                    tenant_id=str(tenant.id),
                    tenant_name=tenant.name,
                    dashboard_url=f"/tenant/{tenant.id}/dashboard",
                    started_at=now,
                    expires_in=issued.expires_in,
                    warnings=audit.warnings,
                )
            )
