"""
Logout Use Case

Revokes the caller's current session.
"""

from typing import Optional
from uuid import UUID

from src.app.services.audit_logger import AuditLogger
from src.app.services.client_info import ClientInfo
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, AuditCategory
from src.libs.result import Result, Return
from .dtos import LogoutResponse


class LogoutUseCase:
    """
    Use case for logging out of one device.

    Business Rules:
    - Always succeeds; logging out twice is not an error
    - Revokes the session named by the access token, expired or not
    - A refresh token supplied with the request is revoked too, but only
      if its session belongs to the same account
    - Without an access token the refresh token alone identifies the
      session; holding it is proof enough to end it
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        account_id: Optional[UUID],
        session_id: Optional[UUID],
        refresh_token: Optional[str] = None,
        client: Optional[ClientInfo] = None,
    ) -> Result[LogoutResponse]:
        async with self.uow:
            registry = SessionRegistry(self.uow)
            targets = {}

            if account_id is not None and session_id is not None:
                session = await self.uow.sessions.get_by_id(session_id)
                if session is not None and session.account_id == account_id:
                    targets[session.id] = session

            if refresh_token:
                session = await registry.find_by_refresh_token(refresh_token)
                if session is not None and account_id in (None, session.account_id):
                    targets[session.id] = session

            audit = AuditLogger(self.uow)
            revoked = 0
            for target, session in targets.items():
                if await registry.revoke(target):
                    revoked += 1
                    await audit.record(
                        AuditCategory.session,
                        AuditAction.revoked,
                        actor_id=session.account_id,
                        tenant_id=session.tenant_id,
                        subject_account_id=session.account_id,
                        client=client,
                        metadata={"session_id": str(target), "reason": "logout"},
                    )

            await self.uow.commit()

            return Return.ok(
                LogoutResponse(status="logged_out", revoked_count=revoked, warnings=audit.warnings)
            )
