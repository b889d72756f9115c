"""
Authentication Use Cases

All authentication-related business logic.
"""

from .login_use_case import LoginUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutUseCase
from .authenticate_use_case import AuthenticateUseCase
from .dtos import (
    AccountInfo,
    LoginResponse,
    LogoutResponse,
    Principal,
    RefreshTokenResponse,
)

__all__ = [
    # Use Cases
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "AuthenticateUseCase",
    # DTOs - Responses
    "LoginResponse",
    "RefreshTokenResponse",
    "LogoutResponse",
    # DTOs - Nested Models
    "AccountInfo",
    "Principal",
]
