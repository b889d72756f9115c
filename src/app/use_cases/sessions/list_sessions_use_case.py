"""
List Sessions Use Case

Shows the caller the devices they are logged in on.
"""

from typing import Optional
from uuid import UUID

from src.app.services.session_registry import SessionRegistry, SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.libs.result import Error, Result, Return
from .dtos import ListSessionsResponse, SessionInfo


class ListSessionsUseCase:
    """
    Business Rules:
    - Only active, unexpired sessions that are not idle are listed, newest first
    - The session behind the caller's token is flagged is_current
    - Reports the device limit that applies to the account
    """

    def __init__(self, uow: UnitOfWork, session_settings: SessionSettings):
        self.uow = uow
        self.session_settings = session_settings

    async def execute(
        self, account_id: UUID, current_session_id: Optional[UUID] = None
    ) -> Result[ListSessionsResponse]:
        async with self.uow:
            account = await self.uow.accounts.get_by_id(account_id)
            if account is None:
                return Return.err(Error("NOT_FOUND", "Account not found"))

            registry = SessionRegistry(self.uow, settings=self.session_settings)
            now = utcnow()
            sessions = await self.uow.sessions.list_active_by_account(
                account_id, now, active_since=registry.active_since(account, now)
            )

            return Return.ok(
                ListSessionsResponse(
                    sessions=[
                        SessionInfo(
                            id=str(s.id),
                            device_info=s.device_info,
                            browser=s.browser,
                            ip_address=s.ip_address,
                            created_at=s.created_at,
                            last_used_at=s.last_used_at,
                            expires_at=s.expires_at,
                            is_current=s.id == current_session_id,
                        )
                        for s in sessions
                    ],
                    max_devices=registry.device_limit(account),
                )
            )
