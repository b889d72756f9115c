from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Tenant, TenantStatus


class ITenantRepository(ABC):
    """Tenants as seen by provisioning, billing and impersonation"""

    @abstractmethod
    async def get_by_id(self, tenant_id: UUID) -> Optional[Tenant]:
        pass

    @abstractmethod
    async def get_by_license_key(self, license_key: str) -> Optional[Tenant]:
        pass

    @abstractmethod
    async def list_all(self, status: Optional[TenantStatus] = None) -> List[Tenant]:
        """Ordered by name, optionally filtered by status"""
        pass

    @abstractmethod
    async def create(self, tenant: Tenant) -> Tenant:
        pass

    @abstractmethod
    async def update(self, tenant: Tenant) -> Tenant:
        """Persist status or license changes"""
        pass
