"""
Get Current Impersonation Use Case
"""

from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.libs.result import Result, Return
from .dtos import CurrentImpersonationResponse


class GetCurrentImpersonationUseCase:
    """
    Read-only lookup of the admin's active impersonation.

    An active row whose token lifetime has passed is reported as none;
    the sweep moves it to expired later.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, admin_id: UUID) -> Result[CurrentImpersonationResponse]:
        async with self.uow:
            impersonation = await self.uow.impersonations.get_active_by_admin(admin_id)
            if impersonation is None or not impersonation.is_live(utcnow()):
                return Return.ok(CurrentImpersonationResponse(active=False))

            tenant = await self.uow.tenants.get_by_id(impersonation.tenant_id)

            return Return.ok(
                CurrentImpersonationResponse(
                    active=True,
                    impersonation_id=str(impersonation.id),
                    tenant_id=str(impersonation.tenant_id),
                    tenant_name=tenant.name if tenant else None,
                    reason=impersonation.reason,
                    started_at=impersonation.started_at,
                    expires_at=impersonation.expires_at,
                )
            )
