"""
Manage Assignments Use Case

Direct role assignments to accounts and tenant-wide role grants.
"""

from typing import List, Optional
from uuid import UUID

from src.app.services.audit_logger import AuditLogger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AccountRole, AuditAction, AuditCategory, Role, TenantRoleGrant
from src.libs.result import Error, Result, Return
from .dtos import AssignmentResponse


class ManageAssignmentsUseCase:
    """
    Use case for granting and withdrawing roles.

    Business Rules:
    - Account, tenant and role must exist (NOT_FOUND)
    - A tenant-owned role can only be used inside its own tenant
    - Assigning an already-held role reactivates it; nothing is duplicated
    - Withdrawal is soft: the row stays with is_active = False
    - Withdrawing something not currently held is NOT_FOUND
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def list_account_roles(self, account_id: UUID) -> Result[List[AssignmentResponse]]:
        async with self.uow:
            if await self.uow.accounts.get_by_id(account_id) is None:
                return Return.err(Error("NOT_FOUND", "Account not found"))
            assignments = await self.uow.assignments.list_account_roles(account_id)
            return Return.ok([AssignmentResponse.from_account_role(a) for a in assignments])

    async def assign_role(
        self,
        account_id: UUID,
        role_id: UUID,
        actor_id: UUID,
        tenant_id: Optional[UUID] = None,
    ) -> Result[AssignmentResponse]:
        async with self.uow:
            account = await self.uow.accounts.get_by_id(account_id)
            if account is None:
                return Return.err(Error("NOT_FOUND", "Account not found"))
            role = await self.uow.roles.get_by_id(role_id)
            if role is None:
                return Return.err(Error("NOT_FOUND", "Role not found"))
            if tenant_id is not None and await self.uow.tenants.get_by_id(tenant_id) is None:
                return Return.err(Error("NOT_FOUND", "Tenant not found"))
            scope_error = _scope_error(role, tenant_id)
            if scope_error:
                return Return.err(scope_error)

            assignment = await self.uow.assignments.find_account_role(account_id, role_id, tenant_id)
            if assignment is None:
                assignment = AccountRole(
                    account_id=account_id,
                    role_id=role_id,
                    tenant_id=tenant_id,
                    assigned_by=actor_id,
                )
            else:
                assignment.is_active = True
                assignment.assigned_by = actor_id
                assignment.assigned_at = utcnow()
            await self.uow.assignments.save_account_role(assignment)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.rbac,
                AuditAction.created,
                actor_id=actor_id,
                tenant_id=tenant_id,
                subject_account_id=account_id,
                metadata={"role_id": str(role_id), "role": role.name},
            )

            await self.uow.commit()

            return Return.ok(AssignmentResponse.from_account_role(assignment, audit.warnings))

    async def unassign_role(
        self,
        account_id: UUID,
        role_id: UUID,
        actor_id: UUID,
        tenant_id: Optional[UUID] = None,
    ) -> Result[AssignmentResponse]:
        async with self.uow:
            assignment = await self.uow.assignments.find_account_role(account_id, role_id, tenant_id)
            if assignment is None or not assignment.is_active:
                return Return.err(Error("NOT_FOUND", "Assignment not found"))

            assignment.is_active = False
            await self.uow.assignments.save_account_role(assignment)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.rbac,
                AuditAction.deleted,
                actor_id=actor_id,
                tenant_id=tenant_id,
                subject_account_id=account_id,
                metadata={"role_id": str(role_id)},
            )

            await self.uow.commit()

            return Return.ok(AssignmentResponse.from_account_role(assignment, audit.warnings))

    async def grant_tenant_role(
        self, tenant_id: UUID, role_id: UUID, actor_id: UUID
    ) -> Result[AssignmentResponse]:
        async with self.uow:
            if await self.uow.tenants.get_by_id(tenant_id) is None:
                return Return.err(Error("NOT_FOUND", "Tenant not found"))
            role = await self.uow.roles.get_by_id(role_id)
            if role is None:
                return Return.err(Error("NOT_FOUND", "Role not found"))
            scope_error = _scope_error(role, tenant_id)
            if scope_error:
                return Return.err(scope_error)

            grant = await self.uow.assignments.find_tenant_grant(tenant_id, role_id)
            if grant is None:
                grant = TenantRoleGrant(tenant_id=tenant_id, role_id=role_id, granted_by=actor_id)
            else:
                grant.is_active = True
                grant.granted_by = actor_id
                grant.granted_at = utcnow()
            await self.uow.assignments.save_tenant_grant(grant)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.rbac,
                AuditAction.created,
                actor_id=actor_id,
                tenant_id=tenant_id,
                metadata={"role_id": str(role_id), "role": role.name, "scope": "tenant"},
            )

            await self.uow.commit()

            return Return.ok(AssignmentResponse.from_tenant_grant(grant, audit.warnings))

    async def withdraw_tenant_role(
        self, tenant_id: UUID, role_id: UUID, actor_id: UUID
    ) -> Result[AssignmentResponse]:
        async with self.uow:
            grant = await self.uow.assignments.find_tenant_grant(tenant_id, role_id)
            if grant is None or not grant.is_active:
                return Return.err(Error("NOT_FOUND", "Tenant grant not found"))

            grant.is_active = False
            await self.uow.assignments.save_tenant_grant(grant)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.rbac,
                AuditAction.deleted,
                actor_id=actor_id,
                tenant_id=tenant_id,
                metadata={"role_id": str(role_id), "scope": "tenant"},
            )

            await self.uow.commit()

            return Return.ok(AssignmentResponse.from_tenant_grant(grant, audit.warnings))


def _scope_error(role: Role, tenant_id: Optional[UUID]) -> Optional[Error]:
    if role.tenant_id is not None and role.tenant_id != tenant_id:
        return Error("VALIDATION_ERROR", "Role belongs to another tenant")
    return None
