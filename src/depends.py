from typing import Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError, to_http_error
from src.app.services.client_info import ClientInfo
from src.app.services.credentials import CredentialVerifier
from src.app.services.session_registry import SessionSettings
from src.app.services.token_issuer import TokenClaims, TokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import AuthenticateUseCase, Principal
from src.libs.result import Error

# SQLite: wait on the database write lock instead of failing with "database is locked"
connect_args = {"timeout": 30} if ApplicationConfig.DB_URI.startswith("sqlite") else {}

engine = create_async_engine(
    ApplicationConfig.DB_URI, echo=False, future=True, connect_args=connect_args
)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)

INVALID_TOKEN = Error("INVALID_OR_EXPIRED_TOKEN", "Invalid or expired token")


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_session_settings(request: Request) -> SessionSettings:
    return request.app.state.session_settings


def get_credentials(request: Request) -> CredentialVerifier:
    return request.app.state.credentials


def get_client_info(request: Request) -> ClientInfo:
    """IP (first X-Forwarded-For hop when behind a proxy) and User-Agent"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip_address = forwarded.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return ClientInfo(ip_address=ip_address, user_agent=request.headers.get("user-agent"))


async def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> TokenClaims:
    """
    Dependency to extract and verify the bearer token.

    Only checks signature and lifetime; use get_current_principal where the
    session or impersonation behind the token must still be live.

    Raises:
        ClientError: 401 if token is missing, invalid or expired
    """
    if credentials is None:
        raise ClientError(INVALID_TOKEN, status_code=status.HTTP_401_UNAUTHORIZED)

    claims = tokens.decode(credentials.credentials)
    if claims is None:
        raise ClientError(INVALID_TOKEN, status_code=status.HTTP_401_UNAUTHORIZED)

    return claims


async def get_logout_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> Optional[TokenClaims]:
    """
    Bearer claims for logout: signature checked, expiry ignored.

    Never raises; a missing or forged token just yields None and logout
    falls back to the refresh token in the body.
    """
    if credentials is None:
        return None
    return tokens.decode(credentials.credentials, verify_expiry=False)


async def get_current_principal(
    claims: TokenClaims = Depends(get_token_claims),
    uow: UnitOfWork = Depends(get_unit_of_work),
    session_settings: SessionSettings = Depends(get_session_settings),
) -> Principal:
    """
    Dependency resolving the caller against live session, impersonation
    and account state.

    Raises:
        ClientError: 401 INVALID_OR_EXPIRED_TOKEN or ACCOUNT_INACTIVE
    """
    result = await AuthenticateUseCase(uow, session_settings).execute(claims)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


def require_permission(permission: str):
    """
    Dependency factory: the caller must hold the given permission.

    Raises:
        ClientError: 403 INSUFFICIENT_PERMISSION
    """

    async def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.has_permission(permission):
            raise ClientError(
                Error("INSUFFICIENT_PERMISSION", f"Permission {permission} required"),
                status_code=status.HTTP_403_FORBIDDEN,
            )
        return principal

    return dependency
