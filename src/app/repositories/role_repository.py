from abc import ABC, abstractmethod
from typing import List, Optional, Set
from uuid import UUID

from src.domain.entities import Permission, Role


class IRoleRepository(ABC):
    """Role repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, role_id: UUID) -> Optional[Role]:
        """Get role by ID"""
        pass

    @abstractmethod
    async def get_by_name(self, name: str, tenant_id: Optional[UUID] = None) -> Optional[Role]:
        """Get role by name (case-insensitive) within a scope"""
        pass

    @abstractmethod
    async def list_visible(self, tenant_id: Optional[UUID] = None) -> List[Role]:
        """Global roles plus roles owned by tenant_id"""
        pass

    @abstractmethod
    async def create(self, role: Role) -> Role:
        """Create a new role"""
        pass

    @abstractmethod
    async def update(self, role: Role) -> Role:
        """Update existing role"""
        pass

    @abstractmethod
    async def delete(self, role: Role) -> None:
        """Delete a role and its permission joins"""
        pass

    @abstractmethod
    async def is_in_use(self, role_id: UUID) -> bool:
        """True if any active assignment or tenant grant references the role"""
        pass

    @abstractmethod
    async def get_permissions(self, role_id: UUID) -> List[Permission]:
        """Permissions joined to a role"""
        pass

    @abstractmethod
    async def set_permissions(self, role_id: UUID, permission_ids: Set[UUID]) -> None:
        """Replace a role's permission joins"""
        pass


class IPermissionRepository(ABC):
    """Permission repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, permission_id: UUID) -> Optional[Permission]:
        """Get permission by ID"""
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Permission]:
        """Get permission by name"""
        pass

    @abstractmethod
    async def list_all(self) -> List[Permission]:
        """All permissions ordered by category and name"""
        pass

    @abstractmethod
    async def create(self, permission: Permission) -> Permission:
        """Create a new permission"""
        pass

    @abstractmethod
    async def delete(self, permission: Permission) -> None:
        """Delete a permission"""
        pass

    @abstractmethod
    async def is_in_use(self, permission_id: UUID) -> bool:
        """True if any role is joined to the permission"""
        pass

    @abstractmethod
    async def names_for_roles(self, role_ids: Set[UUID]) -> Set[str]:
        """Distinct permission names reachable from the given roles"""
        pass
