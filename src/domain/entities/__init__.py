"""
POS Auth Domain Entities

All domain entities organized by model.
Each aggregate in its own file.
"""

# Export all enums
from .enums import (
    AccountStatus,
    AuditAction,
    AuditCategory,
    ImpersonationStatus,
    PermissionCode,
    RiskLevel,
    SessionStatus,
    SystemRole,
    TenantStatus,
)

# Export all entities
from .tenant import Tenant
from .account import Account
from .session import Session
from .role import AccountRole, Permission, Role, RolePermission, TenantRoleGrant
from .impersonation_session import ImpersonationSession
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "AccountStatus",
    "AuditAction",
    "AuditCategory",
    "ImpersonationStatus",
    "PermissionCode",
    "RiskLevel",
    "SessionStatus",
    "SystemRole",
    "TenantStatus",
    # Entities
    "Tenant",
    "Account",
    "Session",
    "Role",
    "Permission",
    "RolePermission",
    "AccountRole",
    "TenantRoleGrant",
    "ImpersonationSession",
    "AuditEvent",
]
