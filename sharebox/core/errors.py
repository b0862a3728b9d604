"""
Error taxonomy shared by every service.

Services raise a ``ShareboxError`` subclass; the HTTP layer turns each one into
a JSON body ``{"kind": ..., "message": ...}`` with the matching status code.
Store and storage exception text never reaches the message.
"""
from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    INVALID_OPERATION = "invalid_operation"
    STORAGE_ERROR = "storage_error"
    AUTH_ERROR = "auth_error"


class ShareboxError(Exception):
    kind: ErrorKind
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class NotFound(ShareboxError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class Forbidden(ShareboxError):
    kind = ErrorKind.FORBIDDEN
    status_code = 403


class Conflict(ShareboxError):
    kind = ErrorKind.CONFLICT
    status_code = 409


class InvalidOperation(ShareboxError):
    kind = ErrorKind.INVALID_OPERATION
    status_code = 400


class StorageError(ShareboxError):
    kind = ErrorKind.STORAGE_ERROR
    status_code = 500


class AuthError(ShareboxError):
    kind = ErrorKind.AUTH_ERROR
    status_code = 401
