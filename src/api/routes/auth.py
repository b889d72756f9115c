from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field

from src.api.error import to_http_error
from src.app.services.client_info import ClientInfo
from src.app.services.credentials import CredentialVerifier
from src.app.services.session_registry import SessionSettings
from src.app.services.token_issuer import TokenClaims, TokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    LoginResponse,
    LoginUseCase,
    LogoutResponse,
    LogoutUseCase,
    RefreshTokenResponse,
    RefreshTokenUseCase,
)
from src.depends import (
    get_client_info,
    get_credentials,
    get_logout_claims,
    get_session_settings,
    get_token_issuer,
    get_unit_of_work,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    Validates incoming login request.
    """

    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=1, max_length=72, description="Account password")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    credentials: CredentialVerifier = Depends(get_credentials),
    tokens: TokenIssuer = Depends(get_token_issuer),
    session_settings: SessionSettings = Depends(get_session_settings),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Account Login

    Verifies credentials, opens a session for this device and returns an
    access token plus a refresh token.

    Raises:
        - 401 Unauthorized: Invalid credentials or inactive account
        - 400 Bad Request: Device limit reached (details carry the counts)
        - 500 Internal Server Error: Server error
    """
    use_case = LoginUseCase(uow, credentials, tokens, session_settings)
    result = await use_case.execute(request.email, request.password, client)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class RefreshRequest(BaseModel):
    """Refresh token HTTP request payload"""

    refresh_token: str = Field(..., min_length=1, description="Refresh token")


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=RefreshTokenResponse)
async def refresh(
    request: RefreshRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    tokens: TokenIssuer = Depends(get_token_issuer),
    session_settings: SessionSettings = Depends(get_session_settings),
):
    """
    Refresh Access Token

    Rotates the refresh token: the old one stops working and a new pair
    is returned.

    Raises:
        - 401 Unauthorized: Unknown, revoked or expired refresh token
        - 500 Internal Server Error: Server error
    """
    use_case = RefreshTokenUseCase(uow, tokens, session_settings)
    result = await use_case.execute(request.refresh_token)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class LogoutRequest(BaseModel):
    refresh_token: Optional[str] = Field(
        None, description="Refresh token of the session to end; enough on its own without a bearer token"
    )


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    request: Optional[LogoutRequest] = None,
    claims: Optional[TokenClaims] = Depends(get_logout_claims),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Logout

    Revokes the current session. Always 200: an expired access token is
    accepted, and without any usable bearer token the refresh token in the
    body identifies the session. Succeeds even if it was already revoked.
    """
    use_case = LogoutUseCase(uow)
    result = await use_case.execute(
        claims.account_id if claims else None,
        claims.session_id if claims else None,
        refresh_token=request.refresh_token if request else None,
        client=client,
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value
