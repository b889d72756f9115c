from abc import ABC, abstractmethod
from typing import List, Optional, Set
from uuid import UUID

from src.domain.entities import AccountRole, TenantRoleGrant


class IRoleAssignmentRepository(ABC):
    """Direct assignments and tenant-wide grants - application layer"""

    @abstractmethod
    async def get_account_role(self, assignment_id: UUID) -> Optional[AccountRole]:
        """Get a direct assignment by ID"""
        pass

    @abstractmethod
    async def find_account_role(
        self, account_id: UUID, role_id: UUID, tenant_id: Optional[UUID]
    ) -> Optional[AccountRole]:
        """Find an assignment for the exact (account, role, tenant) triple"""
        pass

    @abstractmethod
    async def list_account_roles(self, account_id: UUID) -> List[AccountRole]:
        """Active direct assignments of an account"""
        pass

    @abstractmethod
    async def save_account_role(self, assignment: AccountRole) -> AccountRole:
        """Create or update a direct assignment"""
        pass

    @abstractmethod
    async def get_tenant_grant(self, grant_id: UUID) -> Optional[TenantRoleGrant]:
        """Get a tenant grant by ID"""
        pass

    @abstractmethod
    async def find_tenant_grant(self, tenant_id: UUID, role_id: UUID) -> Optional[TenantRoleGrant]:
        """Find the grant of a role to a tenant"""
        pass

    @abstractmethod
    async def save_tenant_grant(self, grant: TenantRoleGrant) -> TenantRoleGrant:
        """Create or update a tenant grant"""
        pass

    @abstractmethod
    async def active_role_ids(self, account_id: UUID, tenant_id: Optional[UUID]) -> Set[UUID]:
        """
        Role IDs currently held by an account in a tenant context:
        active direct assignments (unscoped or scoped to tenant_id) plus
        active grants to tenant_id.
        """
        pass
