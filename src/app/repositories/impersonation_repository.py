from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import ImpersonationSession


class IImpersonationRepository(ABC):
    """ImpersonationSession repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, impersonation_id: UUID) -> Optional[ImpersonationSession]:
        """Get impersonation session by ID"""
        pass

    @abstractmethod
    async def get_active_by_admin(self, admin_id: UUID) -> Optional[ImpersonationSession]:
        """The admin's single active impersonation session, if any"""
        pass

    @abstractmethod
    async def list_active_by_tenant(self, tenant_id: UUID) -> List[ImpersonationSession]:
        """Active impersonation sessions targeting a tenant"""
        pass

    @abstractmethod
    async def list_stale(self, now: datetime) -> List[ImpersonationSession]:
        """Rows still active whose token lifetime has passed"""
        pass

    @abstractmethod
    async def create(self, impersonation: ImpersonationSession) -> ImpersonationSession:
        """Create a new impersonation session"""
        pass

    @abstractmethod
    async def update(self, impersonation: ImpersonationSession) -> ImpersonationSession:
        """Persist a status change"""
        pass
