from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import to_http_error
from src.app.services.client_info import ClientInfo
from src.app.services.session_registry import SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import Principal
from src.app.use_cases.sessions import (
    ListSessionsResponse,
    ListSessionsUseCase,
    RevokeSessionsResponse,
    RevokeSessionsUseCase,
)
from src.depends import (
    get_client_info,
    get_current_principal,
    get_session_settings,
    get_unit_of_work,
    require_permission,
)
from src.domain.entities import PermissionCode

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get("", status_code=status.HTTP_200_OK, response_model=ListSessionsResponse)
async def list_sessions(
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    session_settings: SessionSettings = Depends(get_session_settings),
):
    """
    List Own Sessions

    Active devices of the caller with device, browser and IP metadata.
    """
    use_case = ListSessionsUseCase(uow, session_settings)
    result = await use_case.execute(principal.account_id, principal.session_id)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class RevokeAllSessionsRequest(BaseModel):
    """Request to revoke all sessions for an account"""

    account_id: UUID = Field(..., description="Account whose sessions will be revoked")


@router.post("/revoke-all", status_code=status.HTTP_200_OK, response_model=RevokeSessionsResponse)
async def revoke_all_sessions(
    request: RevokeAllSessionsRequest,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Revoke All Sessions

    Revokes all active sessions of an account. Useful for:
    - Security incidents (account compromise)
    - Password changes
    - Admin-initiated logout

    Authorization:
    - Accounts can revoke their own sessions
    - user.edit holders can revoke sessions of accounts in their tenant
    - sessions.revoke_all holders can revoke any account's sessions

    Raises:
        - 403 Forbidden: Insufficient permissions
        - 404 Not Found: Account not found
    """
    use_case = RevokeSessionsUseCase(uow)
    result = await use_case.revoke_all_sessions(request.account_id, principal, client)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post("/revoke-others", status_code=status.HTTP_200_OK, response_model=RevokeSessionsResponse)
async def revoke_other_sessions(
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Logout Other Devices

    Revokes every session of the caller except the one making the request.
    """
    use_case = RevokeSessionsUseCase(uow)
    result = await use_case.revoke_all_except_current(principal, client)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post("/logout-all", status_code=status.HTTP_200_OK, response_model=RevokeSessionsResponse)
async def logout_all(
    principal: Principal = Depends(require_permission(PermissionCode.sessions_revoke_all.value)),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Platform-wide Logout

    Revokes every active session of every account. Every refresh token
    stops working at once.

    Raises:
        - 403 Forbidden: sessions.revoke_all required
    """
    use_case = RevokeSessionsUseCase(uow)
    result = await use_case.logout_all(principal, client)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.delete("/{session_id}", status_code=status.HTTP_200_OK, response_model=RevokeSessionsResponse)
async def revoke_session(
    session_id: UUID,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Revoke Specific Session

    Raises:
        - 403 Forbidden: Insufficient permissions
        - 404 Not Found: Session not found
    """
    use_case = RevokeSessionsUseCase(uow)
    result = await use_case.revoke_specific_session(session_id, principal, client)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value
