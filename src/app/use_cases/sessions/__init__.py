"""
Session Management Use Cases
"""

from .list_sessions_use_case import ListSessionsUseCase
from .revoke_sessions_use_case import RevokeSessionsUseCase
from .sweep_expired_use_case import SweepExpiredUseCase
from .dtos import ListSessionsResponse, RevokeSessionsResponse, SessionInfo, SweepResponse

__all__ = [
    "ListSessionsUseCase",
    "RevokeSessionsUseCase",
    "SweepExpiredUseCase",
    "ListSessionsResponse",
    "RevokeSessionsResponse",
    "SessionInfo",
    "SweepResponse",
]
