"""
Refresh Token Use Case

Rotates a session's refresh token and mints a new access token.
"""

import logging

from src.app.services.audit_logger import AuditLogger
from src.app.services.permission_resolver import PermissionResolver
from src.app.services.session_registry import SessionRegistry, SessionSettings
from src.app.services.token_issuer import TokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AccountStatus, AuditAction, AuditCategory, SessionStatus
from src.libs.result import Error, Result, Return
from .dtos import RefreshTokenResponse

logger = logging.getLogger(__name__)

INVALID_OR_EXPIRED = Error("INVALID_OR_EXPIRED_TOKEN", "Invalid or expired refresh token")


class RefreshTokenUseCase:
    """
    Use case for refreshing access tokens.

    Business Rules:
    - Refresh token rotation: old token invalidated, new token issued
    - Unknown, revoked and expired tokens all fail the same way
    - A revoked session's token being replayed is audited as a violation
    - Rotation is compare-and-swap, so two racing refreshes with the same
      token cannot both succeed
    - Expiry extends by the refresh window on each rotation
    - A session idle past its timeout cannot be refreshed
    """

    def __init__(self, uow: UnitOfWork, tokens: TokenIssuer, session_settings: SessionSettings):
        self.uow = uow
        self.tokens = tokens
        self.session_settings = session_settings

    async def execute(self, refresh_token: str) -> Result[RefreshTokenResponse]:
        """
        Execute refresh token use case.

        Args:
            refresh_token: The refresh token to verify and rotate

        Returns:
            Result with RefreshTokenResponse, or INVALID_OR_EXPIRED_TOKEN
        """
        async with self.uow:
            now = utcnow()
            registry = SessionRegistry(self.uow, self.tokens, self.session_settings)
            session = await registry.find_by_refresh_token(refresh_token)

            if session is None:
                return Return.err(INVALID_OR_EXPIRED)

            if not session.is_live(now):
                if session.status == SessionStatus.revoked:
                    logger.warning("Refresh attempted on revoked session %s", session.id)
                    audit = AuditLogger(self.uow)
                    await audit.record(
                        AuditCategory.session,
                        AuditAction.violation,
                        actor_id=session.account_id,
                        tenant_id=session.tenant_id,
                        subject_account_id=session.account_id,
                        outcome="denied",
                        metadata={"session_id": str(session.id), "reason": "revoked_token_reuse"},
                    )
                    await self.uow.commit()
                return Return.err(INVALID_OR_EXPIRED)

            account = await self.uow.accounts.get_by_id(session.account_id)
            if account is None or account.status != AccountStatus.active:
                return Return.err(INVALID_OR_EXPIRED)
            if session.is_idle(now, registry.idle_timeout(account)):
                logger.info("Refresh refused for idle session %s", session.id)
                return Return.err(INVALID_OR_EXPIRED)

            new_refresh_token = await registry.rotate(session, refresh_token, now=now)
            if new_refresh_token is None:
                # Lost the race against another refresh or a revocation
                return Return.err(INVALID_OR_EXPIRED)

            permissions = await PermissionResolver(self.uow).resolve(account.id, session.tenant_id)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.session,
                AuditAction.refreshed,
                actor_id=account.id,
                tenant_id=session.tenant_id,
                subject_account_id=account.id,
                metadata={"session_id": str(session.id)},
            )

            await self.uow.commit()

            access = self.tokens.issue_access_token(
                account, session.tenant_id, permissions, session.id, now=now
            )

            return Return.ok(
                RefreshTokenResponse(
                    access_token=access.token,
                    refresh_token=new_refresh_token,
                    expires_in=access.expires_in,
                    session_id=str(session.id),
                    warnings=audit.warnings,
                )
            )
