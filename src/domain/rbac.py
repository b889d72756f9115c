"""
Built-in role and permission catalog.

SYSTEM_ROLE_PERMISSIONS is the single mapping from a SystemRole to the
permissions it carries. validate_role_mapping() is run at startup so a role
without an entry, or an entry naming an unknown permission, stops the
service instead of silently granting nothing.
"""

from typing import Dict, FrozenSet, Iterable, NamedTuple

from src.domain.entities.enums import PermissionCode as P
from src.domain.entities.enums import RiskLevel, SystemRole


class PermissionSpec(NamedTuple):
    category: str
    risk_level: RiskLevel
    description: str


PERMISSION_CATALOG: Dict[P, PermissionSpec] = {
    P.dashboard_view: PermissionSpec("general", RiskLevel.low, "View dashboard"),
    P.inventory_view: PermissionSpec("inventory", RiskLevel.low, "View inventory items"),
    P.inventory_create: PermissionSpec("inventory", RiskLevel.medium, "Create inventory items"),
    P.inventory_edit: PermissionSpec("inventory", RiskLevel.medium, "Edit inventory items"),
    P.inventory_delete: PermissionSpec("inventory", RiskLevel.high, "Delete inventory items"),
    P.inventory_import: PermissionSpec("inventory", RiskLevel.medium, "Import inventory"),
    P.inventory_export: PermissionSpec("inventory", RiskLevel.low, "Export inventory"),
    P.inventory_adjust: PermissionSpec("inventory", RiskLevel.medium, "Adjust stock levels"),
    P.sales_view: PermissionSpec("sales", RiskLevel.low, "View sales records"),
    P.sales_create: PermissionSpec("sales", RiskLevel.medium, "Create sales"),
    P.sales_edit: PermissionSpec("sales", RiskLevel.high, "Edit sales records"),
    P.sales_delete: PermissionSpec("sales", RiskLevel.critical, "Delete sales records"),
    P.sales_refund: PermissionSpec("sales", RiskLevel.high, "Process refunds"),
    P.patient_view: PermissionSpec("patients", RiskLevel.medium, "View patient records"),
    P.patient_create: PermissionSpec("patients", RiskLevel.medium, "Create patient records"),
    P.patient_edit: PermissionSpec("patients", RiskLevel.medium, "Edit patient records"),
    P.patient_delete: PermissionSpec("patients", RiskLevel.high, "Delete patient records"),
    P.prescription_view: PermissionSpec("prescriptions", RiskLevel.medium, "View prescriptions"),
    P.prescription_create: PermissionSpec("prescriptions", RiskLevel.high, "Create prescriptions"),
    P.prescription_edit: PermissionSpec("prescriptions", RiskLevel.high, "Edit prescriptions"),
    P.prescription_delete: PermissionSpec("prescriptions", RiskLevel.critical, "Delete prescriptions"),
    P.prescription_fill: PermissionSpec("prescriptions", RiskLevel.high, "Fill prescriptions"),
    P.prescription_dispense: PermissionSpec("prescriptions", RiskLevel.high, "Dispense medication"),
    P.clinical_tools: PermissionSpec("clinical", RiskLevel.medium, "Access clinical tools"),
    P.reports_view: PermissionSpec("reports", RiskLevel.low, "View reports"),
    P.reports_create: PermissionSpec("reports", RiskLevel.low, "Create reports"),
    P.reports_export: PermissionSpec("reports", RiskLevel.medium, "Export reports"),
    P.user_view: PermissionSpec("users", RiskLevel.low, "View user accounts"),
    P.user_create: PermissionSpec("users", RiskLevel.high, "Create user accounts"),
    P.user_edit: PermissionSpec("users", RiskLevel.high, "Edit user accounts and their sessions"),
    P.user_delete: PermissionSpec("users", RiskLevel.critical, "Deactivate user accounts"),
    P.settings_view: PermissionSpec("settings", RiskLevel.low, "View settings"),
    P.settings_edit: PermissionSpec("settings", RiskLevel.high, "Edit settings"),
    P.tenant_admin: PermissionSpec("system", RiskLevel.high, "Administer own tenant"),
    P.tenant_manage: PermissionSpec("system", RiskLevel.critical, "Manage all tenants"),
    P.impersonate_tenant: PermissionSpec("system", RiskLevel.critical, "Operate as a tenant"),
    P.impersonate_view_logs: PermissionSpec("system", RiskLevel.medium, "View impersonation logs"),
    P.sessions_revoke_all: PermissionSpec("system", RiskLevel.critical, "Log out every session platform-wide"),
    P.roles_manage: PermissionSpec("system", RiskLevel.critical, "Manage roles and permissions"),
    P.system_admin: PermissionSpec("system", RiskLevel.critical, "Full system administration"),
    P.system_audit_logs: PermissionSpec("system", RiskLevel.medium, "View audit logs"),
    P.system_backup: PermissionSpec("system", RiskLevel.critical, "Backup and restore"),
}

_PLATFORM_ONLY = {
    P.tenant_manage,
    P.impersonate_tenant,
    P.impersonate_view_logs,
    P.sessions_revoke_all,
    P.roles_manage,
    P.system_admin,
    P.system_audit_logs,
    P.system_backup,
}

SYSTEM_ROLE_PERMISSIONS: Dict[SystemRole, FrozenSet[P]] = {
    SystemRole.super_admin: frozenset(P),
    SystemRole.operations: frozenset(
        {
            P.dashboard_view,
            P.inventory_view,
            P.inventory_create,
            P.inventory_edit,
            P.inventory_import,
            P.inventory_export,
            P.inventory_adjust,
            P.sales_view,
            P.sales_create,
            P.sales_edit,
            P.sales_refund,
            P.patient_view,
            P.reports_view,
            P.reports_create,
            P.reports_export,
            P.impersonate_view_logs,
            P.system_audit_logs,
        }
    ),
    SystemRole.tenant_admin: frozenset(
        set(P)
        - _PLATFORM_ONLY
        - {P.user_delete, P.sales_delete, P.prescription_delete}
    ),
    SystemRole.pharmacist: frozenset(
        {
            P.dashboard_view,
            P.inventory_view,
            P.inventory_create,
            P.inventory_edit,
            P.inventory_export,
            P.inventory_adjust,
            P.sales_view,
            P.sales_create,
            P.patient_view,
            P.patient_create,
            P.patient_edit,
            P.prescription_view,
            P.prescription_create,
            P.prescription_edit,
            P.prescription_fill,
            P.prescription_dispense,
            P.clinical_tools,
            P.reports_view,
            P.reports_export,
        }
    ),
    SystemRole.cashier: frozenset(
        {
            P.dashboard_view,
            P.inventory_view,
            P.inventory_export,
            P.sales_view,
            P.sales_create,
            P.patient_view,
            P.prescription_view,
            P.prescription_fill,
            P.prescription_dispense,
        }
    ),
}


class RoleMappingError(Exception):
    pass


def validate_role_mapping(
    mapping: Dict[SystemRole, Iterable[P]] = SYSTEM_ROLE_PERMISSIONS,
) -> None:
    """Fail if any role is unmapped or maps to a permission outside the catalog."""
    missing_roles = [role.value for role in SystemRole if role not in mapping]
    if missing_roles:
        raise RoleMappingError(f"Roles without a permission mapping: {missing_roles}")

    for role, permissions in mapping.items():
        if not isinstance(role, SystemRole):
            raise RoleMappingError(f"Unknown role in mapping: {role!r}")
        unknown = [p for p in permissions if p not in PERMISSION_CATALOG]
        if unknown:
            raise RoleMappingError(f"Role {role.value} maps to unknown permissions: {unknown}")

    uncatalogued = [p.value for p in P if p not in PERMISSION_CATALOG]
    if uncatalogued:
        raise RoleMappingError(f"Permissions missing from catalog: {uncatalogued}")


def permissions_for_role(role: SystemRole) -> FrozenSet[str]:
    return frozenset(p.value for p in SYSTEM_ROLE_PERMISSIONS[role])
