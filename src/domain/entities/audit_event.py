"""
AuditEvent Entity

Append-only log of session and impersonation lifecycle events.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utcnow
from .enums import AuditAction, AuditCategory


class AuditEvent(SQLModel, table=True):
    """
    AuditEvent entity - immutable log entry.

    Business Rules:
    - Immutable (never updated or deleted)
    - id is a monotonically increasing sequence; ordering by it gives write order
    - actor_id is null for system actions (sweeps, billing integration)
    - Metadata stores extra context (durations, counts, reasons)
    """

    __tablename__ = "audit_events"

    id: Optional[int] = Field(default=None, primary_key=True)

    actor_id: Optional[UUID] = Field(default=None, index=True)
    tenant_id: Optional[UUID] = Field(default=None, index=True)
    subject_account_id: Optional[UUID] = Field(default=None)

    category: AuditCategory
    action: AuditAction
    outcome: str = Field(default="success", max_length=20)

    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None, max_length=500)
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_audit_created_at", "created_at"),
        Index("idx_audit_category_action", "category", "action"),
    )
