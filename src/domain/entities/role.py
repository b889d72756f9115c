"""
Role, Permission and assignment entities.

Roles bundle permissions. Accounts get roles either directly (AccountRole)
or through their tenant (TenantRoleGrant).
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel, UniqueConstraint

from src.domain.base import utcnow
from .enums import RiskLevel


class Role(SQLModel, table=True):
    """
    Role entity - a named bundle of permissions.

    Business Rules:
    - System roles (is_system) cannot be renamed or deleted
    - is_global roles apply platform-wide; others belong to tenant_id
    - Deletion blocked while any active assignment or grant references it
    """

    __tablename__ = "roles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100, index=True)
    description: Optional[str] = Field(default=None, max_length=500)
    level: int = Field(default=10)
    is_system: bool = Field(default=False)
    is_global: bool = Field(default=True)
    tenant_id: Optional[UUID] = Field(default=None, foreign_key="tenants.id", index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))


class Permission(SQLModel, table=True):
    """
    Permission entity - an atomic capability.

    Business Rules:
    - Name is unique (dotted identifier, e.g. sales.refund)
    - System permissions cannot be deleted
    """

    __tablename__ = "permissions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(unique=True, index=True, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    category: str = Field(default="general", max_length=50)
    risk_level: RiskLevel = Field(default=RiskLevel.low)
    is_system: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))


class RolePermission(SQLModel, table=True):
    """Many-to-many join between roles and permissions"""

    __tablename__ = "role_permissions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    role_id: UUID = Field(foreign_key="roles.id", nullable=False, index=True)
    permission_id: UUID = Field(foreign_key="permissions.id", nullable=False, index=True)

    __table_args__ = (UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),)


class AccountRole(SQLModel, table=True):
    """
    Direct role assignment to an account.

    Business Rules:
    - Withdrawn assignments keep their row with is_active = False
    - tenant_id null means the assignment applies in every tenant context
    """

    __tablename__ = "account_roles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    account_id: UUID = Field(foreign_key="accounts.id", nullable=False)
    role_id: UUID = Field(foreign_key="roles.id", nullable=False, index=True)
    tenant_id: Optional[UUID] = Field(default=None, foreign_key="tenants.id")
    is_active: bool = Field(default=True)
    assigned_by: Optional[UUID] = Field(default=None)

    assigned_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_account_role_account_active", "account_id", "is_active"),)


class TenantRoleGrant(SQLModel, table=True):
    """
    Tenant-wide role grant: every account of the tenant holds the role.

    Business Rules:
    - Withdrawn grants keep their row with is_active = False
    """

    __tablename__ = "tenant_role_grants"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False)
    role_id: UUID = Field(foreign_key="roles.id", nullable=False, index=True)
    is_active: bool = Field(default=True)
    granted_by: Optional[UUID] = Field(default=None)

    granted_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_tenant_grant_tenant_active", "tenant_id", "is_active"),)
