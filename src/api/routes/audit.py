"""
Audit API Routes

Handles audit event retrieval endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from src.api.error import to_http_error
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.audit import AuditEventsResponse, GetAuditEventsUseCase
from src.app.use_cases.auth import Principal
from src.depends import get_unit_of_work, require_permission
from src.domain.entities import PermissionCode

router = APIRouter(prefix="/audit", tags=["Audit"])


@router.get("/events", status_code=status.HTTP_200_OK, response_model=AuditEventsResponse)
async def get_audit_events(
    principal: Principal = Depends(require_permission(PermissionCode.system_audit_logs.value)),
    uow: UnitOfWork = Depends(get_unit_of_work),
    tenant_id: Optional[UUID] = Query(None, description="Only events in this tenant"),
    actor_id: Optional[UUID] = Query(None, description="Only events by this account"),
    category: Optional[str] = Query(None, description="session, impersonation, auth, tenant, rbac"),
    action: Optional[str] = Query(None, description="started, stopped, revoked, ..."),
    limit: int = Query(50, ge=1, le=100, description="Maximum number of events to return"),
    cursor: Optional[str] = Query(None, description="Pagination cursor"),
):
    """
    Get Audit Events

    Query Parameters:
        - tenant_id, actor_id, category, action: optional filters
        - limit: Maximum number of events to return (1-100, default 50)
        - cursor: Pagination cursor for fetching next page

    Returns:
        - events: List of audit events ordered by newest first
        - next_cursor: Cursor for next page (null if no more events)

    Raises:
        - 401 Unauthorized: Invalid or expired token
        - 403 Forbidden: system.audit_logs required
    """
    use_case = GetAuditEventsUseCase(uow)
    result = await use_case.execute(
        tenant_id=tenant_id,
        actor_id=actor_id,
        category=category,
        action=action,
        limit=limit,
        cursor=cursor,
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value
