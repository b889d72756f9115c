"""
Token Issuer

Mints HS256 access tokens, opaque refresh tokens and impersonation tokens.
The signing settings are built once at startup and handed to the issuer;
nothing here reads configuration per request.
"""

import calendar
import hashlib
import secrets
from datetime import UTC, datetime, timedelta
from typing import Iterable, List, Optional
from uuid import UUID

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, ValidationError

from src.domain.base import utcnow
from src.domain.entities import Account, SystemRole

MAX_IMPERSONATION_TTL = timedelta(hours=24)


class ConfigurationError(Exception):
    """Fatal misconfiguration detected at startup"""


class TokenSettings(BaseModel):
    """Immutable signing configuration"""

    model_config = ConfigDict(frozen=True)

    secret: str
    algorithm: str = "HS256"
    issuer: Optional[str] = None
    audience: Optional[str] = None
    access_ttl: timedelta = timedelta(minutes=60)
    impersonation_ttl: timedelta = timedelta(minutes=480)

    @classmethod
    def from_config(cls, config) -> "TokenSettings":
        """
        Build settings from ApplicationConfig.

        Raises:
            ConfigurationError: signing key missing or blank
        """
        secret = getattr(config, "JWT_SECRET", None)
        if not secret or not str(secret).strip():
            raise ConfigurationError("JWT_SECRET must be set to a non-empty value")

        return cls(
            secret=str(secret),
            algorithm=getattr(config, "JWT_ALGORITHM", "HS256"),
            issuer=getattr(config, "JWT_ISSUER", None) or None,
            audience=getattr(config, "JWT_AUDIENCE", None) or None,
            access_ttl=timedelta(minutes=int(getattr(config, "ACCESS_TOKEN_TTL_MINUTES", 60))),
            impersonation_ttl=min(
                timedelta(minutes=int(getattr(config, "IMPERSONATION_TOKEN_TTL_MINUTES", 480))),
                MAX_IMPERSONATION_TTL,
            ),
        )


class TokenClaims(BaseModel):
    """Fixed claim structure carried by every signed token"""

    model_config = ConfigDict(frozen=True)

    account_id: UUID
    email: str
    role: SystemRole
    tenant_id: Optional[UUID] = None
    token_id: str
    session_id: Optional[UUID] = None
    permissions: List[str] = []
    impersonation: bool = False
    impersonation_id: Optional[UUID] = None
    issued_at: datetime
    expires_at: datetime

    def to_payload(self, issuer: Optional[str], audience: Optional[str]) -> dict:
        payload = {
            "sub": str(self.account_id),
            "email": self.email,
            "role": self.role.value,
            "tenant_id": str(self.tenant_id) if self.tenant_id else None,
            "jti": self.token_id,
            "sid": str(self.session_id) if self.session_id else None,
            "permissions": list(self.permissions),
            "imp": self.impersonation,
            "imp_id": str(self.impersonation_id) if self.impersonation_id else None,
            "iat": _timestamp(self.issued_at),
            "exp": _timestamp(self.expires_at),
        }
        if issuer:
            payload["iss"] = issuer
        if audience:
            payload["aud"] = audience
        return payload

    @classmethod
    def from_payload(cls, payload: dict) -> "TokenClaims":
        return cls(
            account_id=payload["sub"],
            email=payload["email"],
            role=payload["role"],
            tenant_id=payload.get("tenant_id"),
            token_id=payload["jti"],
            session_id=payload.get("sid"),
            permissions=payload.get("permissions") or [],
            impersonation=bool(payload.get("imp", False)),
            impersonation_id=payload.get("imp_id"),
            issued_at=_from_timestamp(payload["iat"]),
            expires_at=_from_timestamp(payload["exp"]),
        )


class IssuedToken(BaseModel):
    token: str
    expires_at: datetime
    expires_in: int  # seconds


class TokenIssuer:
    """
    Signs and verifies tokens with process-wide settings.

    Business Rules:
    - Every signed token gets a fresh random jti
    - Refresh tokens are opaque random strings; only their digest is stored
    - Impersonation tokens carry role tenant_admin and never outlive 24 hours
    """

    def __init__(self, settings: TokenSettings):
        self.settings = settings

    def issue_access_token(
        self,
        account: Account,
        tenant_id: Optional[UUID],
        permissions: Iterable[str],
        session_id: Optional[UUID],
        now: Optional[datetime] = None,
    ) -> IssuedToken:
        issued_at = now or utcnow()
        claims = TokenClaims(
            account_id=account.id,
            email=account.email,
            role=account.role,
            tenant_id=tenant_id,
            token_id=_new_token_id(),
            session_id=session_id,
            permissions=sorted(permissions),
            issued_at=issued_at,
            expires_at=issued_at + self.settings.access_ttl,
        )
        return self._sign(claims)

    def issue_refresh_token(self) -> str:
        return secrets.token_urlsafe(32)

    def impersonation_ttl(self, requested: Optional[timedelta] = None) -> timedelta:
        """Clamp a requested impersonation lifetime to (0, 24h]"""
        ttl = requested if requested and requested > timedelta(0) else self.settings.impersonation_ttl
        return min(ttl, MAX_IMPERSONATION_TTL)

    def issue_impersonation_token(
        self,
        admin: Account,
        tenant_id: UUID,
        impersonation_id: UUID,
        permissions: Iterable[str],
        duration: Optional[timedelta] = None,
        now: Optional[datetime] = None,
    ) -> IssuedToken:
        issued_at = now or utcnow()
        claims = TokenClaims(
            account_id=admin.id,
            email=admin.email,
            role=SystemRole.tenant_admin,
            tenant_id=tenant_id,
            token_id=_new_token_id(),
            permissions=sorted(permissions),
            impersonation=True,
            impersonation_id=impersonation_id,
            issued_at=issued_at,
            expires_at=issued_at + self.impersonation_ttl(duration),
        )
        return self._sign(claims)

    def decode(self, token: str, verify_expiry: bool = True) -> Optional[TokenClaims]:
        """
        Verify signature, expiry, issuer and audience.

        verify_expiry=False still checks everything else; only logout uses it,
        so a client whose access token lapsed can still end its session.

        Returns:
            TokenClaims, or None if the token is invalid for any reason
        """
        options = {
            "verify_aud": self.settings.audience is not None,
            "verify_exp": verify_expiry,
        }
        try:
            payload = jwt.decode(
                token,
                self.settings.secret,
                algorithms=[self.settings.algorithm],
                audience=self.settings.audience,
                issuer=self.settings.issuer,
                options=options,
            )
            return TokenClaims.from_payload(payload)
        except (JWTError, KeyError, ValidationError):
            return None

    def _sign(self, claims: TokenClaims) -> IssuedToken:
        payload = claims.to_payload(self.settings.issuer, self.settings.audience)
        token = jwt.encode(payload, self.settings.secret, algorithm=self.settings.algorithm)
        expires_in = int((claims.expires_at - claims.issued_at).total_seconds())
        return IssuedToken(token=token, expires_at=claims.expires_at, expires_in=expires_in)


def hash_refresh_token(refresh_token: str) -> str:
    """SHA-256 hex digest; refresh tokens are high-entropy so no salt is needed"""
    return hashlib.sha256(refresh_token.encode()).hexdigest()


def _new_token_id() -> str:
    return secrets.token_hex(16)


def _timestamp(value: datetime) -> int:
    return calendar.timegm(value.utctimetuple())


def _from_timestamp(value: int) -> datetime:
    return datetime.fromtimestamp(int(value), UTC).replace(tzinfo=None)
