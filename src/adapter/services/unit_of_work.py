from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.account_repository import AccountRepository
from src.adapter.repositories.audit_event_repository import AuditEventRepository
from src.adapter.repositories.impersonation_repository import ImpersonationRepository
from src.adapter.repositories.role_assignment_repository import RoleAssignmentRepository
from src.adapter.repositories.role_repository import PermissionRepository, RoleRepository
from src.adapter.repositories.session_repository import SessionRepository
from src.adapter.repositories.tenant_repository import TenantRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.accounts = AccountRepository(self.session)
        self.tenants = TenantRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.impersonations = ImpersonationRepository(self.session)
        self.roles = RoleRepository(self.session)
        self.permissions = PermissionRepository(self.session)
        self.assignments = RoleAssignmentRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()

    def savepoint(self):
        return self.session.begin_nested()
