from fastapi import status

from src.libs.result import Error

CLIENT_ERROR_STATUS = {
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "ACCOUNT_INACTIVE": status.HTTP_401_UNAUTHORIZED,
    "INVALID_OR_EXPIRED_TOKEN": status.HTTP_401_UNAUTHORIZED,
    "DEVICE_LIMIT_EXCEEDED": status.HTTP_400_BAD_REQUEST,
    "TENANT_NOT_ELIGIBLE": status.HTTP_400_BAD_REQUEST,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "INSUFFICIENT_PERMISSION": status.HTTP_403_FORBIDDEN,
    "NO_ACTIVE_IMPERSONATION": status.HTTP_404_NOT_FOUND,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CONFLICT": status.HTTP_409_CONFLICT,
}


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


def to_http_error(error: Error) -> Exception:
    """ClientError for known business codes, ServerError for anything else"""
    status_code = CLIENT_ERROR_STATUS.get(error.code)
    if status_code is None:
        return ServerError(error)
    return ClientError(error, status_code=status_code)
