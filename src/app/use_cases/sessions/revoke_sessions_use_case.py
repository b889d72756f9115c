"""
Revoke Sessions Use Case

Handles session revocation for security and session management.
"""

import logging
from typing import Optional
from uuid import UUID

from src.app.services.audit_logger import AuditLogger
from src.app.services.client_info import ClientInfo
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.dtos import Principal
from src.domain.entities import Account, AuditAction, AuditCategory, PermissionCode
from src.libs.result import Error, Result, Return
from .dtos import RevokeSessionsResponse

logger = logging.getLogger(__name__)

FORBIDDEN = Error("INSUFFICIENT_PERMISSION", "Not allowed to revoke these sessions")


class RevokeSessionsUseCase:
    """
    Use case for revoking sessions.

    Business Rules:
    - Users can revoke their own sessions
    - Holders of user.edit can revoke sessions of accounts in their tenant
    - Holders of sessions.revoke_all can revoke anyone's sessions
    - Revocation is audit-logged for security compliance
    - Four revocation modes: specific, all, all-except-current, platform-wide
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def _may_manage(self, principal: Principal, target: Account) -> bool:
        if target.id == principal.account_id:
            return True
        if principal.has_permission(PermissionCode.sessions_revoke_all.value):
            return True
        return (
            principal.has_permission(PermissionCode.user_edit.value)
            and principal.tenant_id is not None
            and target.tenant_id == principal.tenant_id
        )

    async def revoke_specific_session(
        self, session_id: UUID, principal: Principal, client: Optional[ClientInfo] = None
    ) -> Result[RevokeSessionsResponse]:
        """
        Revoke a specific session by ID.

        Returns:
            Result with revoked_count 0 or 1, NOT_FOUND, or INSUFFICIENT_PERMISSION
        """
        async with self.uow:
            session = await self.uow.sessions.get_by_id(session_id)
            if session is None:
                return Return.err(Error("NOT_FOUND", "Session not found"))

            target = await self.uow.accounts.get_by_id(session.account_id)
            if target is None:
                return Return.err(Error("NOT_FOUND", "Session not found"))
            if not self._may_manage(principal, target):
                return Return.err(FORBIDDEN)

            revoked = await SessionRegistry(self.uow).revoke(session_id)

            audit = AuditLogger(self.uow)
            if revoked:
                await audit.record(
                    AuditCategory.session,
                    AuditAction.revoked,
                    actor_id=principal.account_id,
                    tenant_id=session.tenant_id,
                    subject_account_id=target.id,
                    client=client,
                    metadata={"session_id": str(session_id), "reason": "revoked_by_user"},
                )

            await self.uow.commit()

            return Return.ok(
                RevokeSessionsResponse(
                    revoked_count=1 if revoked else 0,
                    target_account_id=str(target.id),
                    warnings=audit.warnings,
                )
            )

    async def revoke_all_sessions(
        self, target_account_id: UUID, principal: Principal, client: Optional[ClientInfo] = None
    ) -> Result[RevokeSessionsResponse]:
        """
        Revoke all sessions for an account.

        Returns:
            Result with count of revoked sessions, NOT_FOUND, or INSUFFICIENT_PERMISSION
        """
        async with self.uow:
            target = await self.uow.accounts.get_by_id(target_account_id)
            if target is None:
                return Return.err(Error("NOT_FOUND", "Account not found"))
            if not self._may_manage(principal, target):
                return Return.err(FORBIDDEN)

            count = await SessionRegistry(self.uow).revoke_all(target.id)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.session,
                AuditAction.revoked,
                actor_id=principal.account_id,
                tenant_id=target.tenant_id,
                subject_account_id=target.id,
                client=client,
                metadata={"revoked_count": count, "is_self": target.id == principal.account_id},
            )

            await self.uow.commit()

            return Return.ok(
                RevokeSessionsResponse(
                    revoked_count=count,
                    target_account_id=str(target.id),
                    warnings=audit.warnings,
                )
            )

    async def revoke_all_except_current(
        self, principal: Principal, client: Optional[ClientInfo] = None
    ) -> Result[RevokeSessionsResponse]:
        """
        Revoke all of the caller's sessions except the one in use
        (logout other devices).
        """
        async with self.uow:
            count = await SessionRegistry(self.uow).revoke_all(
                principal.account_id, keep_session_id=principal.session_id
            )

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.session,
                AuditAction.revoked,
                actor_id=principal.account_id,
                tenant_id=principal.tenant_id,
                subject_account_id=principal.account_id,
                client=client,
                metadata={
                    "kept_session_id": str(principal.session_id) if principal.session_id else None,
                    "revoked_count": count,
                },
            )

            await self.uow.commit()

            return Return.ok(
                RevokeSessionsResponse(
                    revoked_count=count,
                    target_account_id=str(principal.account_id),
                    kept_session_id=str(principal.session_id) if principal.session_id else None,
                    warnings=audit.warnings,
                )
            )

    async def logout_all(
        self, principal: Principal, client: Optional[ClientInfo] = None
    ) -> Result[RevokeSessionsResponse]:
        """
        Revoke every active session on the platform.

        Returns:
            Result with the number of sessions revoked, or INSUFFICIENT_PERMISSION
        """
        if not principal.has_permission(PermissionCode.sessions_revoke_all.value):
            return Return.err(FORBIDDEN)

        async with self.uow:
            count = await SessionRegistry(self.uow).revoke_everything()
            logger.warning("Platform-wide logout by %s revoked %d session(s)", principal.account_id, count)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.session,
                AuditAction.revoked,
                actor_id=principal.account_id,
                client=client,
                metadata={"scope": "all", "revoked_count": count},
            )

            await self.uow.commit()

            return Return.ok(RevokeSessionsResponse(revoked_count=count, warnings=audit.warnings))
