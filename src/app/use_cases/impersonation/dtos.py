"""
Impersonation Use Case DTOs
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


def format_duration(elapsed: timedelta) -> str:
    """Human-readable duration: "1h 5min" or "12min" """
    minutes = max(int(elapsed.total_seconds() // 60), 0)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}min"
    return f"{minutes}min"


class StartImpersonationResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    impersonation_id: str
    tenant_id: str
    tenant_name: str
    dashboard_url: str
    started_at: datetime
    expires_in: int
    warnings: List[str] = []


class StopImpersonationResponse(BaseModel):
    impersonation_id: str
    tenant_id: str
    duration: str
    ended_at: datetime
    warnings: List[str] = []


class CurrentImpersonationResponse(BaseModel):
    active: bool
    impersonation_id: Optional[str] = None
    tenant_id: Optional[str] = None
    tenant_name: Optional[str] = None
    reason: Optional[str] = None
    started_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None


class ImpersonationLogEntry(BaseModel):
    id: int
    action: str
    tenant_id: Optional[str] = None
    ip_address: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime


class ImpersonationLogsResponse(BaseModel):
    logs: List[ImpersonationLogEntry]
