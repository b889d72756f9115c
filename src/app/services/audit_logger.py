"""
Audit Logger

Appends lifecycle events inside a savepoint of the caller's transaction.
A failed audit write is rolled back on its own and reported as a warning;
the security action that triggered it still commits.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from src.app.repositories.audit_event_repository import AuditWriteError
from src.app.services.client_info import ClientInfo
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, AuditCategory, AuditEvent

logger = logging.getLogger(__name__)

AUDIT_WRITE_FAILED = "AUDIT_WRITE_FAILED"


class AuditLogger:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.warnings: List[str] = []

    async def record(
        self,
        category: AuditCategory,
        action: AuditAction,
        actor_id: Optional[UUID] = None,
        tenant_id: Optional[UUID] = None,
        subject_account_id: Optional[UUID] = None,
        client: Optional[ClientInfo] = None,
        outcome: str = "success",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Append one audit entry.

        Returns:
            True if written; False if the write failed (warning recorded)
        """
        event = AuditEvent(
            category=category,
            action=action,
            actor_id=actor_id,
            tenant_id=tenant_id,
            subject_account_id=subject_account_id,
            outcome=outcome,
            ip_address=client.ip_address if client else None,
            user_agent=client.truncated_user_agent() if client else None,
            event_metadata=metadata,
        )
        try:
            async with self.uow.savepoint():
                await self.uow.audit_events.create(event)
        except AuditWriteError as exc:
            logger.warning(
                "Audit write failed for %s.%s (actor=%s): %s",
                category.value,
                action.value,
                actor_id,
                exc,
            )
            if AUDIT_WRITE_FAILED not in self.warnings:
                self.warnings.append(AUDIT_WRITE_FAILED)
            return False
        return True
