"""Taxonomía de errores del gateway.

Todas las fallas de transporte llegan al llamador como una subclase de
`GatewayError` con su `ErrorKind` adjunto. La única recuperación local es la
invalidación de sesión ante un 401 (la hace el transporte) y el resultado vacío
ante un envelope irreconocible (no es una excepción).
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NETWORK = "network"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    SERVER = "server"
    HTTP = "http"
    VALIDATION = "validation"
    STORAGE = "storage"
    MALFORMED = "malformed"


DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.NETWORK: "Connection error. Check your internet connection.",
    ErrorKind.UNAUTHORIZED: "Invalid or expired token. Please sign in again.",
    ErrorKind.FORBIDDEN: "Access denied. This application is restricted to gym administrators.",
    ErrorKind.NOT_FOUND: "Resource not found.",
    ErrorKind.SERVER: "Internal server error. Please try again.",
    ErrorKind.HTTP: "The request was rejected by the server.",
    ErrorKind.VALIDATION: "Invalid input.",
    ErrorKind.STORAGE: "Could not access the local credential store.",
    ErrorKind.MALFORMED: "Unrecognized response from the server.",
}


class GatewayError(Exception):
    """Error base; `detail` es el mensaje explícito (del backend) si lo hubo."""

    kind: ErrorKind = ErrorKind.HTTP

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        self.detail = message
        self.message = message or DEFAULT_MESSAGES[self.kind]
        self.status_code = status_code
        super().__init__(self.message)


class NetworkError(GatewayError):
    kind = ErrorKind.NETWORK


class UnauthorizedError(GatewayError):
    kind = ErrorKind.UNAUTHORIZED


class NotAuthenticatedError(UnauthorizedError):
    """No hay token local; se lanza sin tocar la red."""


class ForbiddenError(GatewayError):
    kind = ErrorKind.FORBIDDEN


class NotFoundError(GatewayError):
    kind = ErrorKind.NOT_FOUND


class ServerError(GatewayError):
    kind = ErrorKind.SERVER


class ApiError(GatewayError):
    kind = ErrorKind.HTTP


class InputValidationError(GatewayError):
    kind = ErrorKind.VALIDATION


class StorageError(GatewayError):
    kind = ErrorKind.STORAGE


def error_for_status(status_code: int, message: str | None = None) -> GatewayError:
    """Traduce un status HTTP de error a la excepción de la taxonomía."""

    if status_code == 401:
        return UnauthorizedError(message, status_code=status_code)
    if status_code == 403:
        return ForbiddenError(message, status_code=status_code)
    if status_code == 404:
        return NotFoundError(message, status_code=status_code)
    if status_code >= 500:
        return ServerError(message, status_code=status_code)
    return ApiError(message, status_code=status_code)
