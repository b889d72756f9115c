"""
Account Entity

A principal capable of authenticating.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import AccountStatus, SystemRole


class Account(SQLModel, table=True):
    """
    Account entity - an authenticable user.

    Business Rules:
    - Email is stored lowercase and unique (case-insensitive uniqueness)
    - Password stored as bcrypt hash
    - tenant_id is null for platform-level staff (super_admin, operations)
    - Never hard-deleted: status flips to inactive
    - max_devices overrides the deployment-wide device cap when set
    - inactivity_timeout_minutes overrides the deployment-wide idle timeout when set
    - session_guard is bumped inside every session-creating transaction
      so concurrent logins for one account serialize on this row
    """

    __tablename__ = "accounts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars
    full_name: Optional[str] = Field(default=None, max_length=255)

    status: AccountStatus = Field(default=AccountStatus.active)
    role: SystemRole = Field(default=SystemRole.cashier)
    tenant_id: Optional[UUID] = Field(default=None, foreign_key="tenants.id", index=True)

    max_devices: Optional[int] = Field(default=None)
    inactivity_timeout_minutes: Optional[int] = Field(default=None)
    session_guard: int = Field(default=0)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_account_tenant_status", "tenant_id", "status"),)
