import base64
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.audit_event_repository import AuditWriteError, IAuditEventRepository
from src.domain.entities import AuditAction, AuditCategory, AuditEvent


class AuditEventRepository(IAuditEventRepository):
    """AuditEvent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Create a new audit event (immutable)"""
        try:
            self.session.add(audit_event)
            await self.session.flush()
            await self.session.refresh(audit_event)
        except SQLAlchemyError as exc:
            raise AuditWriteError(str(exc)) from exc
        return audit_event

    async def list_paginated(
        self,
        tenant_id: Optional[UUID] = None,
        actor_id: Optional[UUID] = None,
        category: Optional[AuditCategory] = None,
        action: Optional[AuditAction] = None,
        limit: int = 50,
        cursor: Optional[str] = None,
    ) -> Tuple[List[AuditEvent], Optional[str]]:
        """
        Get audit events with cursor-based pagination.

        Cursor format: base64-encoded sequence id of the last event returned
        """
        stmt = select(AuditEvent)
        if tenant_id is not None:
            stmt = stmt.where(AuditEvent.tenant_id == tenant_id)
        if actor_id is not None:
            stmt = stmt.where(AuditEvent.actor_id == actor_id)
        if category is not None:
            stmt = stmt.where(AuditEvent.category == category)
        if action is not None:
            stmt = stmt.where(AuditEvent.action == action)

        if cursor:
            try:
                cursor_id = int(base64.b64decode(cursor).decode("utf-8"))
                stmt = stmt.where(AuditEvent.id < cursor_id)
            except (ValueError, TypeError):
                # Invalid cursor, ignore and return from beginning
                pass

        # Newest first; the sequence id breaks timestamp ties
        stmt = stmt.order_by(AuditEvent.id.desc()).limit(limit + 1)

        result = await self.session.exec(stmt)
        events = list(result.all())

        has_more = len(events) > limit
        if has_more:
            events = events[:limit]

        next_cursor = None
        if has_more and events:
            next_cursor = base64.b64encode(str(events[-1].id).encode("utf-8")).decode("utf-8")

        return events, next_cursor
