"""
RBAC API Routes

Role, permission and assignment management for platform staff.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from src.api.error import to_http_error
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import Principal
from src.app.use_cases.rbac import (
    AssignmentResponse,
    ManageAssignmentsUseCase,
    ManagePermissionsUseCase,
    ManageRolesUseCase,
    PermissionResponse,
    ResolvedPermissionsResponse,
    ResolvePermissionsUseCase,
    RoleResponse,
)
from src.depends import get_unit_of_work, require_permission
from src.domain.entities import PermissionCode

router = APIRouter(prefix="/rbac", tags=["RBAC"])

require_roles_manage = require_permission(PermissionCode.roles_manage.value)


def _unwrap(result):
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


# ============================================================================
# Roles
# ============================================================================


class CreateRoleRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    level: int = Field(10, ge=1)
    tenant_id: Optional[UUID] = None
    permissions: List[str] = []


class UpdateRoleRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class SetPermissionsRequest(BaseModel):
    permissions: List[str]


@router.get("/roles", response_model=List[RoleResponse])
async def list_roles(
    tenant_id: Optional[UUID] = Query(None, description="Include roles owned by this tenant"),
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    return _unwrap(await ManageRolesUseCase(uow).list_roles(tenant_id))


@router.post("/roles", status_code=status.HTTP_201_CREATED, response_model=RoleResponse)
async def create_role(
    request: CreateRoleRequest,
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Create Custom Role

    Raises:
        - 404 Not Found: Unknown tenant or permission
        - 409 Conflict: Name already in use
    """
    result = await ManageRolesUseCase(uow).create_role(
        request.name,
        principal.account_id,
        description=request.description,
        level=request.level,
        tenant_id=request.tenant_id,
        permission_names=request.permissions,
    )
    return _unwrap(result)


@router.get("/roles/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: UUID,
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    return _unwrap(await ManageRolesUseCase(uow).get_role(role_id))


@router.patch("/roles/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: UUID,
    request: UpdateRoleRequest,
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Rename / Describe Role

    Raises:
        - 404 Not Found: Role not found
        - 409 Conflict: System role, or name already in use
    """
    result = await ManageRolesUseCase(uow).rename_role(
        role_id, principal.account_id, name=request.name, description=request.description
    )
    return _unwrap(result)


@router.delete("/roles/{role_id}")
async def delete_role(
    role_id: UUID,
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Delete Role

    Raises:
        - 404 Not Found: Role not found
        - 409 Conflict: System role, or role still assigned
    """
    return _unwrap(await ManageRolesUseCase(uow).delete_role(role_id, principal.account_id))


@router.put("/roles/{role_id}/permissions", response_model=RoleResponse)
async def set_role_permissions(
    role_id: UUID,
    request: SetPermissionsRequest,
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Replace a custom role's permissions"""
    result = await ManageRolesUseCase(uow).set_role_permissions(
        role_id, request.permissions, principal.account_id
    )
    return _unwrap(result)


# ============================================================================
# Permissions
# ============================================================================


class CreatePermissionRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=100, description="Dotted name, e.g. sales.void")
    description: Optional[str] = Field(None, max_length=500)
    category: str = Field("general", max_length=50)
    risk_level: str = Field("low", description="low, medium, high or critical")


@router.get("/permissions", response_model=List[PermissionResponse])
async def list_permissions(
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    return _unwrap(await ManagePermissionsUseCase(uow).list_permissions())


@router.post("/permissions", status_code=status.HTTP_201_CREATED, response_model=PermissionResponse)
async def create_permission(
    request: CreatePermissionRequest,
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ManagePermissionsUseCase(uow).create_permission(
        request.name,
        principal.account_id,
        description=request.description,
        category=request.category,
        risk_level=request.risk_level,
    )
    return _unwrap(result)


@router.delete("/permissions/{permission_id}")
async def delete_permission(
    permission_id: UUID,
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Delete Permission

    Raises:
        - 404 Not Found: Permission not found
        - 409 Conflict: System permission, or joined to a role
    """
    result = await ManagePermissionsUseCase(uow).delete_permission(
        permission_id, principal.account_id
    )
    return _unwrap(result)


# ============================================================================
# Assignments
# ============================================================================


class AssignRoleRequest(BaseModel):
    role_id: UUID
    tenant_id: Optional[UUID] = None


class GrantTenantRoleRequest(BaseModel):
    role_id: UUID


@router.get("/accounts/{account_id}/roles", response_model=List[AssignmentResponse])
async def list_account_roles(
    account_id: UUID,
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    return _unwrap(await ManageAssignmentsUseCase(uow).list_account_roles(account_id))


@router.post(
    "/accounts/{account_id}/roles",
    status_code=status.HTTP_201_CREATED,
    response_model=AssignmentResponse,
)
async def assign_role(
    account_id: UUID,
    request: AssignRoleRequest,
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ManageAssignmentsUseCase(uow).assign_role(
        account_id, request.role_id, principal.account_id, tenant_id=request.tenant_id
    )
    return _unwrap(result)


@router.delete("/accounts/{account_id}/roles/{role_id}", response_model=AssignmentResponse)
async def unassign_role(
    account_id: UUID,
    role_id: UUID,
    tenant_id: Optional[UUID] = Query(None),
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Withdraw a direct assignment (soft: the row is kept inactive)"""
    result = await ManageAssignmentsUseCase(uow).unassign_role(
        account_id, role_id, principal.account_id, tenant_id=tenant_id
    )
    return _unwrap(result)


@router.get("/accounts/{account_id}/permissions", response_model=ResolvedPermissionsResponse)
async def resolve_account_permissions(
    account_id: UUID,
    tenant_id: Optional[UUID] = Query(None),
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Effective permissions of an account in a tenant context"""
    return _unwrap(await ResolvePermissionsUseCase(uow).execute(account_id, tenant_id))


@router.post(
    "/tenants/{tenant_id}/roles",
    status_code=status.HTTP_201_CREATED,
    response_model=AssignmentResponse,
)
async def grant_tenant_role(
    tenant_id: UUID,
    request: GrantTenantRoleRequest,
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Grant a role to every account of a tenant"""
    result = await ManageAssignmentsUseCase(uow).grant_tenant_role(
        tenant_id, request.role_id, principal.account_id
    )
    return _unwrap(result)


@router.delete("/tenants/{tenant_id}/roles/{role_id}", response_model=AssignmentResponse)
async def withdraw_tenant_role(
    tenant_id: UUID,
    role_id: UUID,
    principal: Principal = Depends(require_roles_manage),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ManageAssignmentsUseCase(uow).withdraw_tenant_role(
        tenant_id, role_id, principal.account_id
    )
    return _unwrap(result)
