"""
Authenticate Use Case

Turns verified token claims into a Principal checked against live state.
"""

from typing import Optional

from src.app.services.permission_resolver import PermissionResolver
from src.app.services.session_registry import SessionRegistry, SessionSettings
from src.app.services.token_issuer import TokenClaims
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AccountStatus, SystemRole
from src.libs.result import Error, Result, Return
from .dtos import Principal

INVALID_OR_EXPIRED = Error("INVALID_OR_EXPIRED_TOKEN", "Invalid or expired token")


class AuthenticateUseCase:
    """
    Use case for resolving the current principal of a request.

    Business Rules:
    - Access tokens are only honoured while their session is live, so
      revocation takes effect immediately rather than at token expiry
    - Impersonation tokens are only honoured while their impersonation
      row is live and belongs to the token's admin
    - Impersonation acts with the tenant admin permission set
    - Ordinary tokens get permissions resolved now, not the login snapshot
    - A session idle past its timeout is rejected; otherwise the request
      counts as use of the session
    - Inactive accounts are rejected with ACCOUNT_INACTIVE
    """

    def __init__(self, uow: UnitOfWork, session_settings: Optional[SessionSettings] = None):
        self.uow = uow
        self.session_settings = session_settings or SessionSettings()

    async def execute(self, claims: TokenClaims) -> Result[Principal]:
        async with self.uow:
            now = utcnow()

            account = await self.uow.accounts.get_by_id(claims.account_id)
            if account is None:
                return Return.err(INVALID_OR_EXPIRED)
            if account.status != AccountStatus.active:
                return Return.err(Error("ACCOUNT_INACTIVE", "Account is inactive"))

            if claims.impersonation:
                if claims.impersonation_id is None:
                    return Return.err(INVALID_OR_EXPIRED)
                impersonation = await self.uow.impersonations.get_by_id(claims.impersonation_id)
                if (
                    impersonation is None
                    or impersonation.admin_id != account.id
                    or not impersonation.is_live(now)
                ):
                    return Return.err(INVALID_OR_EXPIRED)

                return Return.ok(
                    Principal(
                        account_id=account.id,
                        email=account.email,
                        role=SystemRole.tenant_admin,
                        tenant_id=impersonation.tenant_id,
                        impersonation_id=impersonation.id,
                        permissions=PermissionResolver.resolve_for_role(SystemRole.tenant_admin),
                    )
                )

            if claims.session_id is None:
                return Return.err(INVALID_OR_EXPIRED)
            session = await self.uow.sessions.get_by_id(claims.session_id)
            if session is None or session.account_id != account.id:
                return Return.err(INVALID_OR_EXPIRED)

            registry = SessionRegistry(self.uow, settings=self.session_settings)
            if not session.is_live(now, registry.idle_timeout(account)):
                return Return.err(INVALID_OR_EXPIRED)

            if await registry.touch(session, now):
                await self.uow.commit()

            permissions = await PermissionResolver(self.uow).resolve(account.id, session.tenant_id)

            return Return.ok(
                Principal(
                    account_id=account.id,
                    email=account.email,
                    role=account.role,
                    tenant_id=session.tenant_id,
                    session_id=session.id,
                    permissions=permissions,
                )
            )
