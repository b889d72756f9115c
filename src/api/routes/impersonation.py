from datetime import timedelta
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from src.api.error import to_http_error
from src.app.services.client_info import ClientInfo
from src.app.services.token_issuer import TokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import Principal
from src.app.use_cases.impersonation import (
    CurrentImpersonationResponse,
    GetCurrentImpersonationUseCase,
    GetImpersonationLogsUseCase,
    ImpersonationLogsResponse,
    StartImpersonationResponse,
    StartImpersonationUseCase,
    StopImpersonationResponse,
    StopImpersonationUseCase,
)
from src.depends import (
    get_client_info,
    get_current_principal,
    get_token_issuer,
    get_unit_of_work,
    require_permission,
)
from src.domain.entities import PermissionCode

router = APIRouter(prefix="/impersonation", tags=["Impersonation"])


class StartImpersonationRequest(BaseModel):
    tenant_id: UUID = Field(..., description="Tenant to operate in")
    reason: Optional[str] = Field(None, max_length=500, description="Why access is needed")
    duration_minutes: Optional[int] = Field(
        None, gt=0, description="Requested token lifetime; capped at 24 hours"
    )


@router.post("/start", status_code=status.HTTP_200_OK, response_model=StartImpersonationResponse)
async def start_impersonation(
    request: StartImpersonationRequest,
    principal: Principal = Depends(require_permission(PermissionCode.impersonate_tenant.value)),
    uow: UnitOfWork = Depends(get_unit_of_work),
    tokens: TokenIssuer = Depends(get_token_issuer),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Start Impersonation

    Ends any impersonation the admin already has, then opens a new one and
    returns a token scoped to the tenant with tenant admin rights.

    Raises:
        - 400 Bad Request: Tenant missing or not active
        - 403 Forbidden: impersonate.tenant required
    """
    duration = (
        timedelta(minutes=request.duration_minutes) if request.duration_minutes else None
    )
    use_case = StartImpersonationUseCase(uow, tokens)
    result = await use_case.execute(
        principal.account_id, request.tenant_id, request.reason, client, duration=duration
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post("/stop", status_code=status.HTTP_200_OK, response_model=StopImpersonationResponse)
async def stop_impersonation(
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Stop Impersonation

    Callable with either the admin's own token or the impersonation token.

    Raises:
        - 404 Not Found: No active impersonation
    """
    use_case = StopImpersonationUseCase(uow)
    result = await use_case.execute(principal.account_id, client)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.get("/current", status_code=status.HTTP_200_OK, response_model=CurrentImpersonationResponse)
async def current_impersonation(
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Current Impersonation (read-only)"""
    use_case = GetCurrentImpersonationUseCase(uow)
    result = await use_case.execute(principal.account_id)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.get("/logs", status_code=status.HTTP_200_OK, response_model=ImpersonationLogsResponse)
async def impersonation_logs(
    action: Optional[str] = Query(None, description="started, stopped or expired"),
    limit: int = Query(50, description="Maximum entries to return (1-100)"),
    principal: Principal = Depends(
        require_permission(PermissionCode.impersonate_view_logs.value)
    ),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Impersonation Logs

    The caller's own impersonation audit entries, newest first.

    Raises:
        - 400 Bad Request: Invalid limit or action
        - 403 Forbidden: impersonate.view_logs required
    """
    use_case = GetImpersonationLogsUseCase(uow)
    result = await use_case.execute(principal.account_id, action=action, limit=limit)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value
