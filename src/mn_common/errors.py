"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Account
  2xxx: Notes
  3xxx: Todos
  9xxx: System

Every error carries an ErrorKind; the kind alone decides the HTTP status.
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"
    UNAVAILABLE = "unavailable"


HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
    ErrorKind.UNAVAILABLE: 503,
}


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        kind: ErrorKind = ErrorKind.INTERNAL,
    ) -> None:
        self.code = code
        self.message = message
        self.kind = kind
        super().__init__(message)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


# --- 1xxx: Auth/Account ---

class ValidationFailedError(AppError):
    def __init__(self, message: str = "Validation failed") -> None:
        super().__init__(1000, message, ErrorKind.VALIDATION)


class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already taken", ErrorKind.VALIDATION)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already registered", ErrorKind.VALIDATION)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid credentials", ErrorKind.UNAUTHORIZED)


class InvalidTokenError(AppError):
    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(1004, message, ErrorKind.UNAUTHORIZED)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", ErrorKind.UNAUTHORIZED)


class TokenRevokedError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Token has been revoked", ErrorKind.UNAUTHORIZED)


class IncorrectPasswordError(AppError):
    def __init__(self, message: str = "Current password is incorrect") -> None:
        super().__init__(1007, message, ErrorKind.VALIDATION)


class AccountNotFoundError(AppError):
    def __init__(self, account_id: int) -> None:
        super().__init__(1008, f"Account not found: {account_id}", ErrorKind.NOT_FOUND)


# --- 2xxx: Notes ---

class NoteNotFoundError(AppError):
    def __init__(self, note_id: int) -> None:
        super().__init__(2001, f"Note not found: {note_id}", ErrorKind.NOT_FOUND)


# --- 3xxx: Todos ---

class TodoNotFoundError(AppError):
    def __init__(self, todo_id: int) -> None:
        super().__init__(3001, f"Todo not found: {todo_id}", ErrorKind.NOT_FOUND)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, ErrorKind.INTERNAL)


class SessionStoreUnavailableError(AppError):
    """Raised when a security decision depends on an unreachable session store."""

    def __init__(self) -> None:
        super().__init__(9003, "Session store unavailable", ErrorKind.UNAVAILABLE)
