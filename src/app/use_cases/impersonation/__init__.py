"""
Impersonation Use Cases

Superadmin access to tenant contexts, with an audit trail.
"""

from .start_impersonation_use_case import StartImpersonationUseCase
from .stop_impersonation_use_case import StopImpersonationUseCase
from .get_current_impersonation_use_case import GetCurrentImpersonationUseCase
from .get_impersonation_logs_use_case import GetImpersonationLogsUseCase
from .dtos import (
    CurrentImpersonationResponse,
    ImpersonationLogEntry,
    ImpersonationLogsResponse,
    StartImpersonationResponse,
    StopImpersonationResponse,
    format_duration,
)

__all__ = [
    "StartImpersonationUseCase",
    "StopImpersonationUseCase",
    "GetCurrentImpersonationUseCase",
    "GetImpersonationLogsUseCase",
    "CurrentImpersonationResponse",
    "ImpersonationLogEntry",
    "ImpersonationLogsResponse",
    "StartImpersonationResponse",
    "StopImpersonationResponse",
    "format_duration",
]
