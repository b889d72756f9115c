"""
POS Auth Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class AccountStatus(str, Enum):
    """Account status (accounts are never hard-deleted)"""

    active = "active"
    inactive = "inactive"


class TenantStatus(str, Enum):
    """Tenant status"""

    active = "active"
    suspended = "suspended"
    inactive = "inactive"


class SessionStatus(str, Enum):
    """Login session lifecycle. revoked and expired are terminal."""

    active = "active"
    revoked = "revoked"
    expired = "expired"


class ImpersonationStatus(str, Enum):
    """Impersonation session lifecycle. ended and expired are terminal."""

    active = "active"
    ended = "ended"
    expired = "expired"


class RiskLevel(str, Enum):
    """Risk classification of a permission"""

    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class AuditCategory(str, Enum):
    """What kind of lifecycle an audit entry belongs to"""

    auth = "auth"
    session = "session"
    impersonation = "impersonation"
    tenant = "tenant"
    rbac = "rbac"


class AuditAction(str, Enum):
    started = "started"
    stopped = "stopped"
    revoked = "revoked"
    expired = "expired"
    refreshed = "refreshed"
    violation = "violation"
    created = "created"
    updated = "updated"
    deleted = "deleted"
    suspended = "suspended"
    restored = "restored"


class SystemRole(str, Enum):
    """Built-in roles. Lower level means broader authority."""

    super_admin = "super_admin"
    operations = "operations"
    tenant_admin = "tenant_admin"
    pharmacist = "pharmacist"
    cashier = "cashier"

    @property
    def level(self) -> int:
        return ROLE_LEVELS[self]

    @property
    def is_global(self) -> bool:
        return self in (SystemRole.super_admin, SystemRole.operations)


ROLE_LEVELS = {
    SystemRole.super_admin: 1,
    SystemRole.operations: 2,
    SystemRole.tenant_admin: 3,
    SystemRole.pharmacist: 4,
    SystemRole.cashier: 5,
}


class PermissionCode(str, Enum):
    """Atomic capabilities carried in access tokens"""

    dashboard_view = "dashboard.view"

    inventory_view = "inventory.view"
    inventory_create = "inventory.create"
    inventory_edit = "inventory.edit"
    inventory_delete = "inventory.delete"
    inventory_import = "inventory.import"
    inventory_export = "inventory.export"
    inventory_adjust = "inventory.adjust"

    sales_view = "sales.view"
    sales_create = "sales.create"
    sales_edit = "sales.edit"
    sales_delete = "sales.delete"
    sales_refund = "sales.refund"

    patient_view = "patient.view"
    patient_create = "patient.create"
    patient_edit = "patient.edit"
    patient_delete = "patient.delete"

    prescription_view = "prescription.view"
    prescription_create = "prescription.create"
    prescription_edit = "prescription.edit"
    prescription_delete = "prescription.delete"
    prescription_fill = "prescription.fill"
    prescription_dispense = "prescription.dispense"

    clinical_tools = "clinical.tools"

    reports_view = "reports.view"
    reports_create = "reports.create"
    reports_export = "reports.export"

    user_view = "user.view"
    user_create = "user.create"
    user_edit = "user.edit"
    user_delete = "user.delete"

    settings_view = "settings.view"
    settings_edit = "settings.edit"

    tenant_admin = "tenant.admin"
    tenant_manage = "tenant.manage"
    impersonate_tenant = "impersonate.tenant"
    impersonate_view_logs = "impersonate.view_logs"
    sessions_revoke_all = "sessions.revoke_all"
    roles_manage = "roles.manage"
    system_admin = "system.admin"
    system_audit_logs = "system.audit_logs"
    system_backup = "system.backup"
