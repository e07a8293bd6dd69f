"""
Application errors and the JSON envelope they render to.

Handlers raise these; the exception handlers registered in main_async
turn every AppError into ``{"error": message, "code"?, "details"?}``.
"""
from typing import Any, Dict, Optional

from core.config import settings


class AppError(Exception):
    status_code = 400

    def __init__(self, message: str, code: Optional[str] = None, details: Any = None,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.code is not None:
            body["code"] = self.code
        if self.details is not None:
            body["details"] = self.details
        return body


class AuthError(AppError):
    """Missing, malformed, expired or rejected bearer token."""
    status_code = 401


class ValidationError(AppError):
    status_code = 400


class NotFoundError(AppError):
    def __init__(self, message: str = "Recipe not found", **kwargs):
        kwargs.setdefault("status_code", settings.NOT_FOUND_STATUS)
        super().__init__(message, **kwargs)


class AuthorizationError(AppError):
    status_code = 403


class StoreError(AppError):
    """Any failure reported by the record store, passed through as message/code/details."""
    status_code = 400


class DuplicateRecordError(StoreError):
    """Unique index conflict on insert."""


class ImageStorageError(AppError):
    status_code = 400
