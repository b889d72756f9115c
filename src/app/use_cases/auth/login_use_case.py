"""
Login Use Case

Verifies credentials, opens a device session and mints tokens.
"""

import asyncio

from src.app.services.audit_logger import AuditLogger
from src.app.services.client_info import ClientInfo
from src.app.services.credentials import CredentialVerifier
from src.app.services.permission_resolver import PermissionResolver
from src.app.services.session_registry import SessionRegistry, SessionSettings
from src.app.services.token_issuer import TokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AccountStatus, AuditAction, AuditCategory, TenantStatus
from src.libs.result import Error, Result, Return
from .dtos import AccountInfo, LoginResponse

INVALID_CREDENTIALS = Error("INVALID_CREDENTIALS", "Invalid email or password")


class LoginUseCase:
    """
    Use case for account login and token issuance.

    Business Rules:
    - Unknown email and wrong password give the same error and cost the
      same bcrypt work
    - Account status is only revealed after the password verifies
    - An account whose tenant is not active cannot log in
    - Session creation is guarded by the device cap
    - Access token carries the permissions resolved at login time
    - Updates account.last_login_at
    """

    def __init__(
        self,
        uow: UnitOfWork,
        credentials: CredentialVerifier,
        tokens: TokenIssuer,
        session_settings: SessionSettings,
    ):
        self.uow = uow
        self.credentials = credentials
        self.tokens = tokens
        self.session_settings = session_settings

    async def execute(
        self, email: str, password: str, client: ClientInfo
    ) -> Result[LoginResponse]:
        """
        Execute login use case.

        Args:
            email: Account email (any case)
            password: Plain text password
            client: IP and User-Agent of the device

        Returns:
            Result with LoginResponse, or INVALID_CREDENTIALS /
            ACCOUNT_INACTIVE / DEVICE_LIMIT_EXCEEDED
        """
        async with self.uow:
            account = await self.uow.accounts.get_by_email(email)

            if account is None:
                await asyncio.to_thread(self.credentials.burn, password)
                return Return.err(INVALID_CREDENTIALS)

            # bcrypt is CPU bound; keep it off the event loop
            if not await asyncio.to_thread(
                self.credentials.verify, account.password_hash, password
            ):
                return Return.err(INVALID_CREDENTIALS)

            if account.status != AccountStatus.active:
                return Return.err(Error("ACCOUNT_INACTIVE", "Account is inactive"))

            if account.tenant_id is not None:
                tenant = await self.uow.tenants.get_by_id(account.tenant_id)
                if tenant is None or tenant.status != TenantStatus.active:
                    return Return.err(Error("ACCOUNT_INACTIVE", "Account is inactive"))

            now = utcnow()
            registry = SessionRegistry(self.uow, self.tokens, self.session_settings)
            created = await registry.create_session(account, client, now=now)
            if created.is_err():
                return created
            session, refresh_token = created.value

            permissions = await PermissionResolver(self.uow).resolve(account.id, account.tenant_id)

            account.last_login_at = now
            await self.uow.accounts.update(account)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.session,
                AuditAction.started,
                actor_id=account.id,
                tenant_id=account.tenant_id,
                subject_account_id=account.id,
                client=client,
                metadata={"session_id": str(session.id), "device": session.device_info},
            )

            await self.uow.commit()

            access = self.tokens.issue_access_token(
                account, account.tenant_id, permissions, session.id, now=now
            )

            return Return.ok(
                LoginResponse(
                    access_token=access.token,
                    refresh_token=refresh_token,
                    expires_in=access.expires_in,
                    session_id=str(session.id),
                    account=AccountInfo(
                        id=str(account.id),
                        email=account.email,
                        full_name=account.full_name,
                        role=account.role.value,
                        tenant_id=str(account.tenant_id) if account.tenant_id else None,
                    ),
                    permissions=sorted(permissions),
                    warnings=audit.warnings,
                )
            )
