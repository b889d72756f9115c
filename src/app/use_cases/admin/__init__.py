"""Admin use cases for system administration operations."""

from .create_tenant_use_case import (
    CreateTenantUseCase,
    ListTenantsUseCase,
    TenantListResponse,
    TenantResponse,
)
from .register_account_use_case import RegisterAccountUseCase, RegisterAccountResponse
from .suspend_tenant_use_case import SuspendTenantUseCase, SuspendTenantResponse
from .restore_tenant_use_case import RestoreTenantUseCase, RestoreTenantResponse

__all__ = [
    "CreateTenantUseCase",
    "ListTenantsUseCase",
    "TenantResponse",
    "TenantListResponse",
    "RegisterAccountUseCase",
    "RegisterAccountResponse",
    "SuspendTenantUseCase",
    "SuspendTenantResponse",
    "RestoreTenantUseCase",
    "RestoreTenantResponse",
]
