"""
Use Cases

Organized into domain folders:
- auth/: Login, refresh, logout, principal lookup
- sessions/: Device sessions and revocation
- impersonation/: Superadmin tenant access
- admin/: Tenant and account provisioning
- rbac/: Roles, permissions, assignments
- audit/: Audit logs
"""
