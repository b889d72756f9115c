"""
Get Impersonation Logs Use Case
"""

from typing import Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, AuditCategory
from src.libs.result import Error, Result, Return
from .dtos import ImpersonationLogEntry, ImpersonationLogsResponse


class GetImpersonationLogsUseCase:
    """
    Business Rules:
    - Returns the admin's own impersonation audit entries, newest first
    - Optional action filter (started, stopped, expired)
    - Limit between 1 and 100
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, admin_id: UUID, action: Optional[str] = None, limit: int = 50
    ) -> Result[ImpersonationLogsResponse]:
        if limit < 1 or limit > 100:
            return Return.err(Error("VALIDATION_ERROR", "Limit must be between 1 and 100"))

        action_filter = None
        if action:
            try:
                action_filter = AuditAction(action)
            except ValueError:
                return Return.err(Error("VALIDATION_ERROR", f"Unknown action: {action}"))

        async with self.uow:
            events, _ = await self.uow.audit_events.list_paginated(
                actor_id=admin_id,
                category=AuditCategory.impersonation,
                action=action_filter,
                limit=limit,
            )

            return Return.ok(
                ImpersonationLogsResponse(
                    logs=[
                        ImpersonationLogEntry(
                            id=event.id,
                            action=event.action.value,
                            tenant_id=str(event.tenant_id) if event.tenant_id else None,
                            ip_address=event.ip_address,
                            metadata=event.event_metadata,
                            created_at=event.created_at,
                        )
                        for event in events
                    ]
                )
            )
