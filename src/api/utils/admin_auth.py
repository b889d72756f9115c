"""
Back-office API key check for the /admin routes (billing, provisioning).
"""

import hmac
import logging
from typing import Optional

from fastapi import Header, Request, status

from src.api.error import ClientError
from src.libs.result import Error

logger = logging.getLogger(__name__)


def _keys_match(presented: str, configured: Optional[str]) -> bool:
    # An unset key disables the admin surface entirely
    if not configured:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), configured.encode("utf-8"))


async def verify_admin_api_key(
    request: Request, x_admin_api_key: Optional[str] = Header(None)
) -> bool:
    """
    Service-to-service auth via the X-Admin-API-Key header; bearer tokens
    are not accepted here.

    Raises:
        ClientError: 401 UNAUTHORIZED when the header is missing,
            401 INVALID_API_KEY when it does not match
    """
    if not x_admin_api_key:
        raise ClientError(
            Error("UNAUTHORIZED", "Admin API key required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    if not _keys_match(x_admin_api_key, request.app.state.admin_api_key):
        client_host = request.client.host if request.client else "unknown"
        logger.warning("Rejected admin API key from %s on %s", client_host, request.url.path)
        raise ClientError(
            Error("INVALID_API_KEY", "Invalid admin API key"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return True
