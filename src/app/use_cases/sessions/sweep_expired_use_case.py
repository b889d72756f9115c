"""
Sweep Expired Use Case

Moves sessions and impersonations past their lifetime, and sessions left
idle past their inactivity timeout, to expired.
"""

import logging
from typing import Optional

from src.app.services.audit_logger import AuditLogger
from src.app.services.session_registry import SessionRegistry, SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditAction, AuditCategory, ImpersonationStatus
from src.libs.result import Result, Return
from .dtos import SweepResponse

logger = logging.getLogger(__name__)


class SweepExpiredUseCase:
    """
    Business Rules:
    - Active sessions whose expiry has passed become expired
    - Active sessions unused for longer than their account's idle timeout
      become expired
    - Active impersonations whose token lifetime has passed become expired,
      ended at their expiry time
    - Each transition writes an expired audit entry
    - Running twice in a row finds nothing the second time
    """

    def __init__(self, uow: UnitOfWork, session_settings: Optional[SessionSettings] = None):
        self.uow = uow
        self.session_settings = session_settings or SessionSettings()

    async def execute(self) -> Result[SweepResponse]:
        async with self.uow:
            now = utcnow()
            audit = AuditLogger(self.uow)

            registry = SessionRegistry(self.uow, settings=self.session_settings)
            sessions = await registry.sweep_expired(now)
            idle_sessions = await registry.sweep_idle(now)
            for reason, swept in (("lifetime", sessions), ("inactivity", idle_sessions)):
                for session in swept:
                    await audit.record(
                        AuditCategory.session,
                        AuditAction.expired,
                        tenant_id=session.tenant_id,
                        subject_account_id=session.account_id,
                        metadata={"session_id": str(session.id), "reason": reason},
                    )

            impersonations = await self.uow.impersonations.list_stale(now)
            for impersonation in impersonations:
                impersonation.status = ImpersonationStatus.expired
                impersonation.ended_at = impersonation.expires_at
                await self.uow.impersonations.update(impersonation)
                await audit.record(
                    AuditCategory.impersonation,
                    AuditAction.expired,
                    actor_id=impersonation.admin_id,
                    tenant_id=impersonation.tenant_id,
                    metadata={"impersonation_id": str(impersonation.id)},
                )

            await self.uow.commit()

            if sessions or idle_sessions or impersonations:
                logger.info(
                    "Expiry sweep: %d expired session(s), %d idle session(s), %d impersonation(s)",
                    len(sessions),
                    len(idle_sessions),
                    len(impersonations),
                )

            return Return.ok(
                SweepResponse(
                    sessions_expired=len(sessions),
                    sessions_idle=len(idle_sessions),
                    impersonations_expired=len(impersonations),
                    warnings=audit.warnings,
                )
            )
