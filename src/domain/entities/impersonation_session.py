"""
ImpersonationSession Entity

A superadmin operating inside a tenant's context.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import ImpersonationStatus

ACTIVE_PREDICATE = text("status = 'active'")


class ImpersonationSession(SQLModel, table=True):
    """
    ImpersonationSession entity - retained forever for audit.

    Business Rules:
    - At most one active row per admin (partial unique index below)
    - A new start ends the admin's previous active row first
    - ended_at is null only while active
    - Tokens minted for the row stop working once it leaves active
    """

    __tablename__ = "impersonation_sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    admin_id: UUID = Field(foreign_key="accounts.id", nullable=False, index=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)

    status: ImpersonationStatus = Field(default=ImpersonationStatus.active)
    reason: Optional[str] = Field(default=None, max_length=500)

    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None, max_length=500)

    # Timestamps
    started_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    ended_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (
        Index(
            "uq_impersonation_active_admin",
            "admin_id",
            unique=True,
            sqlite_where=ACTIVE_PREDICATE,
            postgresql_where=ACTIVE_PREDICATE,
        ),
        Index("idx_impersonation_tenant_started", "tenant_id", "started_at"),
    )

    def is_live(self, now: datetime) -> bool:
        return self.status == ImpersonationStatus.active and self.expires_at > now
