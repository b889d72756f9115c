from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from src.app.use_cases.auth import Principal
from src.depends import get_current_principal

router = APIRouter(tags=["User"])


class MeResponse(BaseModel):
    """GET /me response payload"""

    account_id: str
    email: str
    role: str
    tenant_id: Optional[str] = None
    session_id: Optional[str] = None
    impersonation: bool
    impersonation_id: Optional[str] = None
    permissions: List[str]


@router.get("/me", status_code=status.HTTP_200_OK, response_model=MeResponse)
async def get_me(principal: Principal = Depends(get_current_principal)):
    """
    Current Principal

    Identity, tenant and permissions of the caller, checked against the
    live session (or impersonation) behind the token.

    Raises:
        - 401 Unauthorized: Invalid or expired token, or inactive account
    """
    return MeResponse(
        account_id=str(principal.account_id),
        email=principal.email,
        role=principal.role.value,
        tenant_id=str(principal.tenant_id) if principal.tenant_id else None,
        session_id=str(principal.session_id) if principal.session_id else None,
        impersonation=principal.is_impersonation,
        impersonation_id=str(principal.impersonation_id) if principal.impersonation_id else None,
        permissions=sorted(principal.permissions),
    )
