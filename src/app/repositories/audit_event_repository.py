from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import AuditAction, AuditCategory, AuditEvent


class AuditWriteError(Exception):
    """Raised when an audit entry could not be persisted"""


class IAuditEventRepository(ABC):
    """AuditEvent repository interface - application layer"""

    @abstractmethod
    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """
        Append an audit event (immutable).

        Raises:
            AuditWriteError: if the store rejected the write
        """
        pass

    @abstractmethod
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

        Returns:
            Tuple of (events list, next_cursor)
            - events: List of audit events, newest first
            - next_cursor: Cursor for next page, None if no more events
        """
        pass
