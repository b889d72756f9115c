"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from typing import FrozenSet, List, Optional
from uuid import UUID

from pydantic import BaseModel

from src.domain.entities import SystemRole


# ============================================================================
# Principal (resolved identity behind a bearer token)
# ============================================================================


class Principal(BaseModel):
    """Identity, tenant and permissions of the caller, checked against live state"""

    account_id: UUID
    email: str
    role: SystemRole
    tenant_id: Optional[UUID] = None
    session_id: Optional[UUID] = None
    impersonation_id: Optional[UUID] = None
    permissions: FrozenSet[str] = frozenset()

    @property
    def is_impersonation(self) -> bool:
        return self.impersonation_id is not None

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


# ============================================================================
# Response DTOs
# ============================================================================


class AccountInfo(BaseModel):
    """Account summary in authentication responses"""

    id: str
    email: str
    full_name: Optional[str] = None
    role: str
    tenant_id: Optional[str] = None


class LoginResponse(BaseModel):
    """Response for login use case"""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    session_id: str
    account: AccountInfo
    permissions: List[str]
    warnings: List[str] = []


class RefreshTokenResponse(BaseModel):
    """Response for refresh token use case"""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    session_id: str
    warnings: List[str] = []


class LogoutResponse(BaseModel):
    """Response for logout use case"""

    status: str
    revoked_count: int
    warnings: List[str] = []
