from typing import Any, Dict, List, Optional
from starlette import status

class AppError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        code: str = "bad_request",
        field: Optional[str] = None,
        errors: Optional[List[dict]] = None,  # [{'code':..., 'message':..., 'field':...}]
        details: Optional[Dict[str, Any]] = None,  # Additional details for the error
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.field = field
        self.errors = errors
        self.details = details


class InvalidArgumentError(AppError):
    """Malformed or missing input"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("status_code", status.HTTP_400_BAD_REQUEST)
        kwargs.setdefault("code", "invalid_argument")
        super().__init__(message, **kwargs)


class NotFoundError(AppError):
    """Referenced entity is absent (or a list lookup matched nothing)"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("status_code", status.HTTP_404_NOT_FOUND)
        kwargs.setdefault("code", "not_found")
        super().__init__(message, **kwargs)


class ConflictError(AppError):
    """Uniqueness violation"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("status_code", status.HTTP_409_CONFLICT)
        kwargs.setdefault("code", "conflict")
        super().__init__(message, **kwargs)


class UploadError(AppError):
    """Blob store write failed, nothing was persisted"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("status_code", status.HTTP_502_BAD_GATEWAY)
        kwargs.setdefault("code", "upload_failed")
        super().__init__(message, **kwargs)


class NoOpError(AppError):
    """A syntactically valid mutation matched zero records"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("status_code", status.HTTP_404_NOT_FOUND)
        kwargs.setdefault("code", "no_op")
        super().__init__(message, **kwargs)


class AuthError(AppError):
    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("status_code", status.HTTP_401_UNAUTHORIZED)
        kwargs.setdefault("code", "unauthorized")
        super().__init__(message, **kwargs)


class ForbiddenError(AppError):
    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("status_code", status.HTTP_403_FORBIDDEN)
        kwargs.setdefault("code", "forbidden")
        super().__init__(message, **kwargs)
