"""
Application error taxonomy.

Every error carries the HTTP status it maps to; the handlers registered in
``mmc_admin.main`` turn them into ``{"error": ...}`` JSON bodies.
"""
from typing import Any, Dict, List, Optional

from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Something went wrong!"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.details}


class ValidationError(AppError):
    """Missing, malformed or out-of-range input."""
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation failed"

    def __init__(self, message: Optional[str] = None, fields: Optional[List[str]] = None):
        self.fields = list(fields or [])
        details = {"fields": self.fields} if self.fields else None
        super().__init__(message, details)


class InvalidIdentifierError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid ID"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class InvalidFileTypeError(AppError):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    message = "Unsupported file type"


class FileTooLargeError(AppError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    message = "File too large"


class AlreadySubscribedError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Email is already subscribed"


class DuplicateAccountError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "User already exists with this username or email"


class DeliveryFailedError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Failed to send newsletter"


# Authentication errors also report ``success: false`` to match the login contract.

class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, **super().to_dict()}


class InvalidCredentialsError(AuthError):
    message = "Invalid credentials"


class AccountLockedError(AuthError):
    status_code = status.HTTP_423_LOCKED
    message = "Account temporarily locked due to too many failed login attempts"


class InvalidTokenError(AuthError):
    message = "Invalid token"


class MissingTokenError(AuthError):
    message = "Access token required"


class AccountNotFoundError(AuthError):
    message = "User not found or inactive"


class PermissionDeniedError(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Only administrators can perform this action"
