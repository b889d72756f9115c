"""
Use Case: Create Tenant / List Tenants

Provisioning endpoints used by the platform back office.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.app.services.audit_logger import AuditLogger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, AuditCategory, Tenant, TenantStatus
from src.libs.result import Error, Result, Return


class TenantResponse(BaseModel):
    id: str
    name: str
    status: str
    license_key: Optional[str] = None
    license_expires_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, tenant: Tenant) -> "TenantResponse":
        return cls(
            id=str(tenant.id),
            name=tenant.name,
            status=tenant.status.value,
            license_key=tenant.license_key,
            license_expires_at=tenant.license_expires_at,
            created_at=tenant.created_at,
        )


class TenantListResponse(BaseModel):
    tenants: List[TenantResponse]


class CreateTenantUseCase:
    """
    Business Rules:
    - Name must be non-blank
    - New tenants start active
    - License metadata is stored as given
    - A license key already held by another tenant is a CONFLICT
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        name: str,
        license_key: Optional[str] = None,
        license_expires_at: Optional[datetime] = None,
    ) -> Result[TenantResponse]:
        if not name or not name.strip():
            return Return.err(Error("VALIDATION_ERROR", "Tenant name is required"))

        license_key = license_key.strip() if license_key and license_key.strip() else None

        async with self.uow:
            if license_key and await self.uow.tenants.get_by_license_key(license_key):
                return Return.err(
                    Error("CONFLICT", "License key is already assigned to another tenant")
                )

            tenant = Tenant(
                name=name.strip(),
                status=TenantStatus.active,
                license_key=license_key,
                license_expires_at=license_expires_at,
            )
            await self.uow.tenants.create(tenant)

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.tenant,
                AuditAction.created,
                tenant_id=tenant.id,
                metadata={"name": tenant.name},
            )

            await self.uow.commit()

            return Return.ok(TenantResponse.from_entity(tenant))


class ListTenantsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, status: Optional[str] = None) -> Result[TenantListResponse]:
        try:
            status_filter = TenantStatus(status) if status else None
        except ValueError:
            return Return.err(Error("VALIDATION_ERROR", f"Unknown tenant status: {status}"))

        async with self.uow:
            tenants = await self.uow.tenants.list_all(status=status_filter)
            return Return.ok(
                TenantListResponse(tenants=[TenantResponse.from_entity(t) for t in tenants])
            )
