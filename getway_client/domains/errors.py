"""
Error taxonomy for the GetWay client.

`ApiError` is raised only by the HTTP client and has exactly four concrete
kinds; callers can branch on `error.kind` or on the subclass. Auth service
failures wrap an `ApiError` (or a malformed response) with a user-facing
message.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ApiErrorKind(str, Enum):
    TIMEOUT = "timeout"
    NETWORK_UNREACHABLE = "network_unreachable"
    HTTP_STATUS = "http_status"
    GENERIC = "generic"


class ApiError(Exception):
    """Base for transport-level failures. Every instance has a readable `message`."""

    kind: ApiErrorKind = ApiErrorKind.GENERIC

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}


class RequestTimeoutError(ApiError):
    kind = ApiErrorKind.TIMEOUT

    def __init__(self, message: str = "Request timeout. Please check your internet connection.") -> None:
        super().__init__(message)


class NetworkUnreachableError(ApiError):
    kind = ApiErrorKind.NETWORK_UNREACHABLE

    def __init__(self, message: str = "No internet connection. Please check your network.") -> None:
        super().__init__(message)


class HttpStatusError(ApiError):
    """Non-2xx response. `errors` holds field-level messages when the server sent them."""

    kind = ApiErrorKind.HTTP_STATUS

    def __init__(
        self,
        status_code: int,
        message: str,
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["status_code"] = self.status_code
        if self.errors:
            out["errors"] = list(self.errors)
        return out


class GenericApiError(ApiError):
    kind = ApiErrorKind.GENERIC

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(message or "An unexpected error occurred")


class AuthServiceError(RuntimeError):
    """Raised by AuthService operations; `original` is the underlying error, if any."""

    default_message = "Authentication request failed"

    def __init__(self, message: str | None = None, original: Exception | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.original = original


class LoginFailed(AuthServiceError):
    default_message = "Login failed. Please try again."


class RegistrationFailed(AuthServiceError):
    default_message = "Registration failed. Please try again."


class ProfileFetchFailed(AuthServiceError):
    default_message = "Failed to get profile"
