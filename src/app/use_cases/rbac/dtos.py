"""
RBAC Use Case DTOs
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.domain.entities import AccountRole, Permission, Role, TenantRoleGrant


class PermissionResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    category: str
    risk_level: str
    is_system: bool

    @classmethod
    def from_entity(cls, permission: Permission) -> "PermissionResponse":
        return cls(
            id=str(permission.id),
            name=permission.name,
            description=permission.description,
            category=permission.category,
            risk_level=permission.risk_level.value,
            is_system=permission.is_system,
        )


class RoleResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    level: int
    is_system: bool
    is_global: bool
    tenant_id: Optional[str] = None
    permissions: List[str] = []
    warnings: List[str] = []

    @classmethod
    def from_entity(
        cls, role: Role, permissions: List[Permission], warnings: Optional[List[str]] = None
    ) -> "RoleResponse":
        return cls(
            id=str(role.id),
            name=role.name,
            description=role.description,
            level=role.level,
            is_system=role.is_system,
            is_global=role.is_global,
            tenant_id=str(role.tenant_id) if role.tenant_id else None,
            permissions=[p.name for p in permissions],
            warnings=warnings or [],
        )


class AssignmentResponse(BaseModel):
    id: str
    role_id: str
    account_id: Optional[str] = None
    tenant_id: Optional[str] = None
    is_active: bool
    assigned_at: datetime
    warnings: List[str] = []

    @classmethod
    def from_account_role(
        cls, assignment: AccountRole, warnings: Optional[List[str]] = None
    ) -> "AssignmentResponse":
        return cls(
            id=str(assignment.id),
            role_id=str(assignment.role_id),
            account_id=str(assignment.account_id),
            tenant_id=str(assignment.tenant_id) if assignment.tenant_id else None,
            is_active=assignment.is_active,
            assigned_at=assignment.assigned_at,
            warnings=warnings or [],
        )

    @classmethod
    def from_tenant_grant(
        cls, grant: TenantRoleGrant, warnings: Optional[List[str]] = None
    ) -> "AssignmentResponse":
        return cls(
            id=str(grant.id),
            role_id=str(grant.role_id),
            tenant_id=str(grant.tenant_id),
            is_active=grant.is_active,
            assigned_at=grant.granted_at,
            warnings=warnings or [],
        )


class ResolvedPermissionsResponse(BaseModel):
    account_id: str
    tenant_id: Optional[str] = None
    permissions: List[str]


class SeedResponse(BaseModel):
    permissions_created: int
    roles_created: int
    roles_synced: int
