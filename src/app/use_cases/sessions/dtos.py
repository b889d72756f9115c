"""
Session Management DTOs
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class SessionInfo(BaseModel):
    """One device session as shown to its owner"""

    id: str
    device_info: Optional[str] = None
    browser: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime
    last_used_at: Optional[datetime] = None
    expires_at: datetime
    is_current: bool = False


class ListSessionsResponse(BaseModel):
    sessions: List[SessionInfo]
    max_devices: int


class RevokeSessionsResponse(BaseModel):
    revoked_count: int
    target_account_id: Optional[str] = None
    kept_session_id: Optional[str] = None
    warnings: List[str] = []


class SweepResponse(BaseModel):
    sessions_expired: int
    sessions_idle: int = 0
    impersonations_expired: int
    warnings: List[str] = []
