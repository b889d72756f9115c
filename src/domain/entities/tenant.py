"""
Tenant Entity

An organizational boundary: one pharmacy business.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import TenantStatus


class Tenant(SQLModel, table=True):
    """
    Tenant entity - isolated pharmacy business.

    Business Rules:
    - Only active tenants can be impersonated
    - Suspension revokes every session scoped to the tenant
    - License metadata is informational; billing owns it
    - A license key belongs to at most one tenant
    """

    __tablename__ = "tenants"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)

    status: TenantStatus = Field(default=TenantStatus.active)

    license_key: Optional[str] = Field(default=None, max_length=100)
    license_expires_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_tenant_status", "status"),
        Index("uq_tenant_license_key", "license_key", unique=True),
    )
