"""
RBAC Use Cases

Roles, permissions, assignments and the built-in catalog.
"""

from .manage_roles_use_case import ManageRolesUseCase
from .manage_permissions_use_case import ManagePermissionsUseCase
from .manage_assignments_use_case import ManageAssignmentsUseCase
from .resolve_permissions_use_case import ResolvePermissionsUseCase
from .seed_system_roles_use_case import SeedSystemRolesUseCase
from .dtos import (
    AssignmentResponse,
    PermissionResponse,
    ResolvedPermissionsResponse,
    RoleResponse,
    SeedResponse,
)

__all__ = [
    "ManageRolesUseCase",
    "ManagePermissionsUseCase",
    "ManageAssignmentsUseCase",
    "ResolvePermissionsUseCase",
    "SeedSystemRolesUseCase",
    "AssignmentResponse",
    "PermissionResponse",
    "ResolvedPermissionsResponse",
    "RoleResponse",
    "SeedResponse",
]
