"""
Session Registry

Tracks login sessions per account and enforces the device cap.

Every method runs inside the caller's unit of work; the caller commits.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.app.services.client_info import ClientInfo
from src.app.services.token_issuer import TokenIssuer, hash_refresh_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Account, Session
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

TOUCH_INTERVAL = timedelta(minutes=1)


class SessionSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_devices: int = 5
    refresh_ttl: timedelta = timedelta(days=7)
    inactivity_timeout: timedelta = timedelta(minutes=30)

    @classmethod
    def from_config(cls, config) -> "SessionSettings":
        return cls(
            max_devices=int(getattr(config, "MAX_DEVICES", 5)),
            refresh_ttl=timedelta(days=int(getattr(config, "REFRESH_TOKEN_TTL_DAYS", 7))),
            inactivity_timeout=timedelta(
                minutes=int(getattr(config, "INACTIVITY_TIMEOUT_MINUTES", 30))
            ),
        )


class SessionRegistry:
    """
    Business Rules:
    - Active, unexpired sessions per account never exceed the device limit
      (account.max_devices if set, else the deployment default)
    - The account row is locked before counting, so count-then-insert is
      one atomic step per account
    - Refresh rotation is a compare-and-swap on the stored digest
    - Revocation sets status revoked and expiry to now; revoking twice is a no-op
    - Sessions idle past the account's timeout are dead: they no longer count
      toward the device limit and the sweep moves them to expired
    - Use is recorded at most once per TOUCH_INTERVAL per session
    """

    def __init__(
        self,
        uow: UnitOfWork,
        tokens: Optional[TokenIssuer] = None,
        settings: Optional[SessionSettings] = None,
    ):
        self.uow = uow
        self.tokens = tokens
        self.settings = settings or SessionSettings()

    def device_limit(self, account: Account) -> int:
        if account.max_devices is not None and account.max_devices > 0:
            return account.max_devices
        return self.settings.max_devices

    def idle_timeout(self, account: Account) -> timedelta:
        if account.inactivity_timeout_minutes is not None and account.inactivity_timeout_minutes > 0:
            return timedelta(minutes=account.inactivity_timeout_minutes)
        return self.settings.inactivity_timeout

    def active_since(self, account: Account, now: datetime) -> datetime:
        """Sessions last used at or before this instant are idle"""
        return now - self.idle_timeout(account)

    async def create_session(
        self,
        account: Account,
        client: ClientInfo,
        now: Optional[datetime] = None,
    ) -> Result[Tuple[Session, str]]:
        """
        Open a session for an account if it is under its device limit.

        Returns:
            Result with (session, clear refresh token), or
            DEVICE_LIMIT_EXCEEDED carrying current_devices and max_devices
        """
        now = now or utcnow()

        if not await self.uow.accounts.lock(account.id):
            return Return.err(Error("NOT_FOUND", "Account not found"))

        limit = self.device_limit(account)
        current = await self.uow.sessions.count_active(
            account.id, now, active_since=self.active_since(account, now)
        )
        if current >= limit:
            logger.info(
                "Device limit reached for account %s (%d/%d)", account.id, current, limit
            )
            return Return.err(
                Error(
                    "DEVICE_LIMIT_EXCEEDED",
                    f"Device limit of {limit} reached. Log out of another device to continue.",
                    details={"current_devices": current, "max_devices": limit},
                )
            )

        refresh_token = self.tokens.issue_refresh_token()
        session = Session(
            account_id=account.id,
            tenant_id=account.tenant_id,
            refresh_token_hash=hash_refresh_token(refresh_token),
            device_info=client.device_info,
            browser=client.browser,
            ip_address=client.ip_address,
            user_agent=client.truncated_user_agent(),
            created_at=now,
            last_used_at=now,
            expires_at=now + self.settings.refresh_ttl,
        )
        await self.uow.sessions.create(session)
        logger.info("Session %s created for account %s", session.id, account.id)
        return Return.ok((session, refresh_token))

    async def find_by_refresh_token(self, refresh_token: str) -> Optional[Session]:
        """Look up a session by refresh token, whatever its status"""
        return await self.uow.sessions.get_by_refresh_token_hash(hash_refresh_token(refresh_token))

    async def rotate(
        self, session: Session, refresh_token: str, now: Optional[datetime] = None
    ) -> Optional[str]:
        """
        Replace the session's refresh token and extend its expiry.

        Returns:
            The new clear refresh token, or None if the old token was no
            longer current (revoked, expired or already rotated)
        """
        now = now or utcnow()
        new_token = self.tokens.issue_refresh_token()
        swapped = await self.uow.sessions.rotate_refresh_token(
            session.id,
            old_hash=hash_refresh_token(refresh_token),
            new_hash=hash_refresh_token(new_token),
            expires_at=now + self.settings.refresh_ttl,
            now=now,
        )
        return new_token if swapped else None

    async def touch(self, session: Session, now: Optional[datetime] = None) -> bool:
        """Record use of the session; returns True if a write was issued"""
        now = now or utcnow()
        if now - session.last_activity() < TOUCH_INTERVAL:
            return False
        await self.uow.sessions.touch(session.id, now)
        session.last_used_at = now
        return True

    async def revoke(self, session_id: UUID, now: Optional[datetime] = None) -> bool:
        """Returns True if the session was active and is now revoked"""
        revoked = await self.uow.sessions.revoke_by_id(session_id, now or utcnow())
        if revoked:
            logger.info("Session %s revoked", session_id)
        return revoked

    async def revoke_all(
        self,
        account_id: UUID,
        keep_session_id: Optional[UUID] = None,
        now: Optional[datetime] = None,
    ) -> int:
        count = await self.uow.sessions.revoke_all_by_account(
            account_id, now or utcnow(), keep_session_id=keep_session_id
        )
        logger.info("Revoked %d session(s) for account %s", count, account_id)
        return count

    async def revoke_tenant(self, tenant_id: UUID, now: Optional[datetime] = None) -> int:
        count = await self.uow.sessions.revoke_all_by_tenant(tenant_id, now or utcnow())
        logger.info("Revoked %d session(s) for tenant %s", count, tenant_id)
        return count

    async def revoke_everything(self, now: Optional[datetime] = None) -> int:
        count = await self.uow.sessions.revoke_all(now or utcnow())
        logger.info("Revoked %d session(s) platform-wide", count)
        return count

    async def sweep_expired(self, now: Optional[datetime] = None) -> List[Session]:
        """Move active sessions past expiry to expired; returns the moved rows"""
        stale = await self.uow.sessions.list_stale(now or utcnow())
        if stale:
            await self.uow.sessions.mark_expired([s.id for s in stale])
        return stale

    async def sweep_idle(self, now: Optional[datetime] = None) -> List[Session]:
        """Move active sessions idle past their account's timeout to expired"""
        now = now or utcnow()
        shortest = self.settings.inactivity_timeout
        override = await self.uow.accounts.shortest_inactivity_timeout()
        if override:
            shortest = min(shortest, timedelta(minutes=override))

        candidates = await self.uow.sessions.list_idle_candidates(now, since=now - shortest)
        idle = [
            session
            for session, account in candidates
            if session.is_idle(now, self.idle_timeout(account))
        ]
        if idle:
            await self.uow.sessions.mark_expired([s.id for s in idle])
        return idle
