"""
Stop Impersonation Use Case
"""

import logging
from typing import Optional
from uuid import UUID

from src.app.services.audit_logger import AuditLogger
from src.app.services.client_info import ClientInfo
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditAction, AuditCategory, ImpersonationStatus
from src.libs.result import Error, Result, Return
from .dtos import StopImpersonationResponse, format_duration

logger = logging.getLogger(__name__)


class StopImpersonationUseCase:
    """
    Business Rules:
    - Fails with NO_ACTIVE_IMPERSONATION when the admin has none
    - Ends the session and audits stopped with its duration
    - Tokens minted for the session stop working immediately
    - The admin's account row is locked before the lookup so a stop racing
      a start sees the impersonation the start left active
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, admin_id: UUID, client: Optional[ClientInfo] = None
    ) -> Result[StopImpersonationResponse]:
        async with self.uow:
            await self.uow.accounts.lock(admin_id)
            impersonation = await self.uow.impersonations.get_active_by_admin(admin_id)
            if impersonation is None:
                return Return.err(
                    Error("NO_ACTIVE_IMPERSONATION", "No active impersonation session")
                )

            now = utcnow()
            duration = format_duration(now - impersonation.started_at)
            impersonation.status = ImpersonationStatus.ended
            impersonation.ended_at = now
            await self.uow.impersonations.update(impersonation)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.impersonation,
                AuditAction.stopped,
                actor_id=admin_id,
                tenant_id=impersonation.tenant_id,
                client=client,
                metadata={"impersonation_id": str(impersonation.id), "duration": duration},
            )

            await self.uow.commit()
            logger.info("Impersonation %s stopped after %s", impersonation.id, duration)

            return Return.ok(
                StopImpersonationResponse(
                    impersonation_id=str(impersonation.id),
                    tenant_id=str(impersonation.tenant_id),
                    duration=duration,
                    ended_at=now,
                    warnings=audit.warnings,
                )
            )
