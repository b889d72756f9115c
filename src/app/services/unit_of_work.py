from abc import ABC, abstractmethod
from typing import AsyncContextManager

from src.app.repositories.account_repository import IAccountRepository
from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.app.repositories.impersonation_repository import IImpersonationRepository
from src.app.repositories.role_assignment_repository import IRoleAssignmentRepository
from src.app.repositories.role_repository import IPermissionRepository, IRoleRepository
from src.app.repositories.session_repository import ISessionRepository
from src.app.repositories.tenant_repository import ITenantRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    accounts: IAccountRepository
    tenants: ITenantRepository
    sessions: ISessionRepository
    impersonations: IImpersonationRepository
    roles: IRoleRepository
    permissions: IPermissionRepository
    assignments: IRoleAssignmentRepository
    audit_events: IAuditEventRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass

    @abstractmethod
    def savepoint(self) -> AsyncContextManager:
        """
        Nested transaction. Leaving the block with an exception rolls back
        only the work done inside it; the outer transaction stays usable.
        """
        pass
