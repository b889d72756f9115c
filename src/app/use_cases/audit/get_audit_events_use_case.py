"""
Get Audit Events Use Case

Retrieves audit events with filters and cursor pagination.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, AuditCategory
from src.libs.result import Error, Result, Return


class AuditEventInfo(BaseModel):
    id: int
    category: str
    action: str
    outcome: str
    actor_id: Optional[str] = None
    actor_email: Optional[str] = None
    tenant_id: Optional[str] = None
    subject_account_id: Optional[str] = None
    ip_address: Optional[str] = None
    timestamp: str
    metadata: Dict[str, Any] = {}


class AuditEventsResponse(BaseModel):
    events: List[AuditEventInfo]
    next_cursor: Optional[str] = None


class GetAuditEventsUseCase:
    """
    Use case for retrieving audit events.

    Business Rules:
    - Caller must hold system.audit_logs (checked at the route)
    - Optional filters: tenant, actor, category, action
    - Results ordered by newest first (write order, by sequence id)
    - Supports cursor-based pagination
    - Each event includes the actor's email when the actor still exists
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        tenant_id: Optional[UUID] = None,
        actor_id: Optional[UUID] = None,
        category: Optional[str] = None,
        action: Optional[str] = None,
        limit: int = 50,
        cursor: Optional[str] = None,
    ) -> Result[AuditEventsResponse]:
        """
        Execute get audit events use case.

        Args:
            tenant_id: Only events in this tenant
            actor_id: Only events by this account
            category: Only this category (session, impersonation, ...)
            action: Only this action (started, stopped, ...)
            limit: Maximum number of events to return (1-100)
            cursor: Pagination cursor (optional)

        Returns:
            Result with events list and next_cursor, or VALIDATION_ERROR
        """
        if limit < 1 or limit > 100:
            return Return.err(Error("VALIDATION_ERROR", "Limit must be between 1 and 100"))

        try:
            category_filter = AuditCategory(category) if category else None
            action_filter = AuditAction(action) if action else None
        except ValueError as exc:
            return Return.err(Error("VALIDATION_ERROR", str(exc)))

        async with self.uow:
            events, next_cursor = await self.uow.audit_events.list_paginated(
                tenant_id=tenant_id,
                actor_id=actor_id,
                category=category_filter,
                action=action_filter,
                limit=limit,
                cursor=cursor,
            )

            emails: Dict[UUID, Optional[str]] = {}
            events_list = []
            for event in events:
                actor_email = None
                if event.actor_id:
                    if event.actor_id not in emails:
                        actor = await self.uow.accounts.get_by_id(event.actor_id)
                        emails[event.actor_id] = actor.email if actor else None
                    actor_email = emails[event.actor_id]

                events_list.append(
                    AuditEventInfo(
                        id=event.id,
                        category=event.category.value,
                        action=event.action.value,
                        outcome=event.outcome,
                        actor_id=str(event.actor_id) if event.actor_id else None,
                        actor_email=actor_email,
                        tenant_id=str(event.tenant_id) if event.tenant_id else None,
                        subject_account_id=(
                            str(event.subject_account_id) if event.subject_account_id else None
                        ),
                        ip_address=event.ip_address,
                        timestamp=event.created_at.isoformat() + "Z",
                        metadata=event.event_metadata or {},
                    )
                )

            return Return.ok(AuditEventsResponse(events=events_list, next_cursor=next_cursor))
