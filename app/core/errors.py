import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    """Категории ошибок шлюза"""
    INVALID_IDENTIFIER = "InvalidIdentifier"
    SERVICE_NOT_CONFIGURED = "ServiceNotConfigured"
    UPSTREAM_UNAVAILABLE = "UpstreamUnavailable"
    NOT_FOUND = "NotFound"
    INTERNAL_FAULT = "InternalFault"


HTTP_STATUS_BY_KIND = {
    ErrorKind.INVALID_IDENTIFIER: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL_FAULT: 500,
    ErrorKind.UPSTREAM_UNAVAILABLE: 502,
    ErrorKind.SERVICE_NOT_CONFIGURED: 503,
}

REDACTED_MESSAGE = "An unexpected error occurred"


class GatewayError(Exception):
    """Базовое исключение приложения"""

    kind: ErrorKind = ErrorKind.INTERNAL_FAULT

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.upstream_status = upstream_status

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def to_dict(self, debug: bool = False) -> dict:
        message = self.message
        if self.kind is ErrorKind.INTERNAL_FAULT and not debug:
            message = REDACTED_MESSAGE
        return {"error": self.kind.value, "message": message}


class InvalidIdentifier(GatewayError):
    kind = ErrorKind.INVALID_IDENTIFIER


class ServiceNotConfigured(GatewayError):
    kind = ErrorKind.SERVICE_NOT_CONFIGURED


class UpstreamUnavailable(GatewayError):
    kind = ErrorKind.UPSTREAM_UNAVAILABLE


class NotFound(GatewayError):
    kind = ErrorKind.NOT_FOUND


class InternalFault(GatewayError):
    kind = ErrorKind.INTERNAL_FAULT


ERROR_CLASS_BY_KIND = {
    ErrorKind.INVALID_IDENTIFIER: InvalidIdentifier,
    ErrorKind.SERVICE_NOT_CONFIGURED: ServiceNotConfigured,
    ErrorKind.UPSTREAM_UNAVAILABLE: UpstreamUnavailable,
    ErrorKind.NOT_FOUND: NotFound,
    ErrorKind.INTERNAL_FAULT: InternalFault,
}


def error_for(kind: ErrorKind, message: str, upstream_status: Optional[int] = None) -> GatewayError:
    """Исключение нужного класса по категории ошибки"""
    return ERROR_CLASS_BY_KIND[kind](message, upstream_status=upstream_status)
