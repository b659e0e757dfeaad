"""Error taxonomy shared by services and the HTTP layer."""

from __future__ import annotations

from typing import Dict, Optional


class AppError(Exception):
    """Base error carrying the HTTP status and client-facing message."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[Dict[str, str]] = None) -> None:
        self.message = message or self.default_message
        self.errors = errors or {}
        super().__init__(self.message)


class AuthRequired(AppError):
    status_code = 401
    default_message = "No token or admin header, authorization denied"


class AuthInvalid(AppError):
    status_code = 401
    default_message = "Token is not valid"


class Forbidden(AppError):
    status_code = 403
    default_message = "Admin privileges required"


class ValidationFailed(AppError):
    status_code = 400
    default_message = "Validation failed. Please check your input."


class Conflict(AppError):
    status_code = 400
    default_message = "User already exists."


class NotFound(AppError):
    status_code = 404
    default_message = "User not found"


class MalformedIdentifier(AppError):
    status_code = 400
    default_message = "Invalid user ID format"


class UploadRejected(AppError):
    status_code = 400
    default_message = "File upload error."

    def __init__(self, message: Optional[str] = None) -> None:
        message = message or self.default_message
        super().__init__(message, {"profileImage": message})


class Internal(AppError):
    status_code = 500
