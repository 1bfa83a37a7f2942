"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth / token / MFA
  2xxx: Validation
  3xxx: Not found
  9xxx: System (database, unknown)

Every AppError is rendered by the global handler as
``{"error": message, "code": code, "details"?: ...}``.
"""

from enum import Enum
from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: Any = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


# --- 1xxx: Auth ---

class AuthErrorKind(str, Enum):
    TOKEN_MISSING = "TOKEN_MISSING"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_REVOKED = "TOKEN_REVOKED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    VERSION_MISMATCH = "VERSION_MISMATCH"
    MFA_REQUIRED = "MFA_REQUIRED"
    MFA_INVALID = "MFA_INVALID"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"


# kind -> (code, default message, http status)
_AUTH_ERRORS: dict[AuthErrorKind, tuple[int, str, int]] = {
    AuthErrorKind.TOKEN_MISSING: (1001, "Access token required", 401),
    AuthErrorKind.TOKEN_EXPIRED: (1002, "Token expired", 401),
    AuthErrorKind.INVALID_TOKEN: (1003, "Invalid token", 403),
    AuthErrorKind.TOKEN_REVOKED: (1004, "Token has been revoked", 401),
    AuthErrorKind.USER_NOT_FOUND: (1005, "User not found", 401),
    AuthErrorKind.VERSION_MISMATCH: (1006, "Token version mismatch", 401),
    AuthErrorKind.MFA_REQUIRED: (1007, "MFA token required", 401),
    AuthErrorKind.MFA_INVALID: (1008, "Invalid MFA token", 401),
    AuthErrorKind.INVALID_CREDENTIALS: (1009, "Invalid username or password", 401),
}


class AuthError(AppError):
    """401/403 family. ``kind`` tells the client whether a silent refresh is worth trying."""

    def __init__(self, kind: AuthErrorKind, message: str | None = None) -> None:
        code, default_message, http_status = _AUTH_ERRORS[kind]
        self.kind = kind
        super().__init__(code, message or default_message, http_status)

    @property
    def is_expired(self) -> bool:
        return self.kind is AuthErrorKind.TOKEN_EXPIRED


class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1010, "Username already exists", 409)


# --- 2xxx: Validation ---

class ValidationError(AppError):
    def __init__(self, message: str = "Validation Error", details: Any = None) -> None:
        super().__init__(2001, message, 400, details)


# --- 3xxx: Not found ---

class NotFoundError(AppError):
    def __init__(self, entity: str, entity_id: str | None = None) -> None:
        message = f"{entity} not found"
        super().__init__(3001, message, 404, {"id": entity_id} if entity_id else None)


# --- 9xxx: System ---

class DatabaseError(AppError):
    def __init__(self, detail: str = "Database error") -> None:
        super().__init__(9001, detail, 500)


class UnknownError(AppError):
    def __init__(self, detail: str = "Internal Server Error") -> None:
        super().__init__(9002, detail, 500)
