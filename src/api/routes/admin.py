"""
Admin API Routes - Back-office Integration Endpoints

These endpoints are for internal service integrations (billing, provisioning).
Authentication is via Admin API Key, not bearer tokens.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, EmailStr, Field

from src.api.error import to_http_error
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.credentials import CredentialVerifier
from src.app.services.session_registry import SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.admin import (
    CreateTenantUseCase,
    ListTenantsUseCase,
    RegisterAccountResponse,
    RegisterAccountUseCase,
    RestoreTenantResponse,
    RestoreTenantUseCase,
    SuspendTenantResponse,
    SuspendTenantUseCase,
    TenantListResponse,
    TenantResponse,
)
from src.app.use_cases.sessions import SweepExpiredUseCase, SweepResponse
from src.depends import get_credentials, get_session_settings, get_unit_of_work

router = APIRouter(
    prefix="/admin", tags=["Admin"], dependencies=[Depends(verify_admin_api_key)]
)


class CreateTenantRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    license_key: Optional[str] = Field(None, max_length=100)
    license_expires_at: Optional[datetime] = None


@router.post("/tenants", status_code=status.HTTP_201_CREATED, response_model=TenantResponse)
async def create_tenant(request: CreateTenantRequest, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Create Tenant

    Requires: X-Admin-API-Key header

    Raises:
        - 400 Bad Request: Blank name
        - 409 Conflict: License key already assigned
    """
    result = await CreateTenantUseCase(uow).execute(
        request.name, request.license_key, request.license_expires_at
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.get("/tenants", status_code=status.HTTP_200_OK, response_model=TenantListResponse)
async def list_tenants(
    status_filter: Optional[str] = Query(None, alias="status"),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """List Tenants, optionally by status"""
    result = await ListTenantsUseCase(uow).execute(status_filter)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/tenants/{tenant_id}/suspend",
    status_code=status.HTTP_200_OK,
    response_model=SuspendTenantResponse,
)
async def suspend_tenant(tenant_id: UUID, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Suspend Tenant

    Billing system endpoint to suspend a tenant for non-payment.
    Revokes all sessions of the tenant and ends impersonations of it.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 404 Not Found: Tenant not found
    """
    result = await SuspendTenantUseCase(uow).execute(tenant_id)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/tenants/{tenant_id}/restore",
    status_code=status.HTTP_200_OK,
    response_model=RestoreTenantResponse,
)
async def restore_tenant(tenant_id: UUID, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Restore Tenant

    Billing system endpoint to restore a suspended tenant after payment.

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 404 Not Found: Tenant not found
    """
    result = await RestoreTenantUseCase(uow).execute(tenant_id)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class RegisterAccountRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    role: str = Field(..., description="super_admin, operations, tenant_admin, pharmacist or cashier")
    tenant_id: Optional[UUID] = None
    full_name: Optional[str] = Field(None, max_length=255)
    max_devices: Optional[int] = Field(None, gt=0)
    inactivity_timeout_minutes: Optional[int] = Field(None, gt=0)


@router.post(
    "/accounts", status_code=status.HTTP_201_CREATED, response_model=RegisterAccountResponse
)
async def register_account(
    request: RegisterAccountRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    credentials: CredentialVerifier = Depends(get_credentials),
):
    """
    Register Account

    Raises:
        - 400 Bad Request: Unknown role or role/tenant mismatch
        - 404 Not Found: Tenant not found
        - 409 Conflict: Email already registered
    """
    result = await RegisterAccountUseCase(uow, credentials).execute(
        email=request.email,
        password=request.password,
        role=request.role,
        tenant_id=request.tenant_id,
        full_name=request.full_name,
        max_devices=request.max_devices,
        inactivity_timeout_minutes=request.inactivity_timeout_minutes,
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post("/sessions/sweep", status_code=status.HTTP_200_OK, response_model=SweepResponse)
async def sweep_expired(
    uow: UnitOfWork = Depends(get_unit_of_work),
    session_settings: SessionSettings = Depends(get_session_settings),
):
    """
    Expire Stale Sessions

    Same work as the periodic sweep, on demand.
    """
    result = await SweepExpiredUseCase(uow, session_settings).execute()

    if result.is_err():
        raise to_http_error(result.error)

    return result.value
