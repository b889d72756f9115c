"""
Session Entity

One logged-in device or browser for an account.
"""

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import SessionStatus


class Session(SQLModel, table=True):
    """
    Session entity - holds the refresh token for one device.

    Business Rules:
    - Refresh tokens are stored as SHA-256 digests, never in clear
    - Tokens rotate on each refresh; expiry extends by the refresh window
    - active -> revoked | expired, both terminal
    - A session unused for longer than its idle timeout is dead even before
      expires_at; every authenticated request counts as use
    - Active, unexpired sessions per account never exceed the device cap
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    account_id: UUID = Field(foreign_key="accounts.id", nullable=False, index=True)
    tenant_id: Optional[UUID] = Field(default=None, foreign_key="tenants.id", index=True)

    refresh_token_hash: str = Field(unique=True, max_length=64)  # SHA-256 hex
    status: SessionStatus = Field(default=SessionStatus.active)

    # Client metadata
    device_info: Optional[str] = Field(default=None, max_length=50)
    browser: Optional[str] = Field(default=None, max_length=50)
    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None, max_length=500)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_session_account_status", "account_id", "status"),
        Index("idx_session_expires_at", "expires_at"),
    )

    def last_activity(self) -> datetime:
        return self.last_used_at or self.created_at

    def is_idle(self, now: datetime, idle_timeout: timedelta) -> bool:
        return self.last_activity() + idle_timeout <= now

    def is_live(self, now: datetime, idle_timeout: Optional[timedelta] = None) -> bool:
        if self.status != SessionStatus.active or self.expires_at <= now:
            return False
        return idle_timeout is None or not self.is_idle(now, idle_timeout)
