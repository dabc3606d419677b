"""
Custom exceptions for Mini CRM.
Provides consistent error handling across the application.
"""
from typing import List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class MiniCRMException(Exception):
    """Base exception for Mini CRM"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "error"
    retryable: bool = False

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code, "retryable": self.retryable}


class ValidationError(MiniCRMException):
    """Bad or missing input, including cross-workspace references"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"

    def __init__(self, message: str = "Validation failed", field: str = None):
        if field:
            message = f"Validation failed for field '{field}': {message}"
        super().__init__(message)


class AuthError(MiniCRMException):
    """Authentication failed"""
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "auth_error"

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


class ForbiddenError(MiniCRMException):
    """Access denied"""
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"

    def __init__(self, message: str = "You don't have permission to access this resource"):
        super().__init__(message)


class NotFoundError(MiniCRMException):
    """Resource not found"""
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"

    def __init__(self, resource: str = "Resource", resource_id: str = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class AlreadyExistsError(MiniCRMException):
    """Resource already exists"""
    status_code = status.HTTP_409_CONFLICT
    code = "already_exists"

    def __init__(self, resource: str = "Resource", field: str = None, value: str = None):
        if field and value:
            message = f"{resource} with {field} '{value}' already exists"
        else:
            message = f"{resource} already exists"
        super().__init__(message)


class ProviderError(MiniCRMException):
    """Completion provider call failed or returned unusable text"""
    code = "provider_error"
    retryable = True

    def __init__(self, provider: str = "Completion provider", message: str = None):
        msg = f"{provider} call failed"
        if message:
            msg = f"{msg}: {message}"
        super().__init__(msg)


class EmptyResultError(MiniCRMException):
    """Sanitization left no usable messages"""
    code = "empty_result"
    retryable = True

    def __init__(self, message: str = "No usable messages were generated"):
        super().__init__(message)


class StorageError(MiniCRMException):
    """Generated messages could not be persisted"""
    code = "storage_error"
    retryable = True

    def __init__(self, message: str = "Generated messages could not be saved", messages: Optional[List[str]] = None):
        self.messages = list(messages or [])
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["messages"] = self.messages
        return data


class ConfigurationError(MiniCRMException):
    """Server is missing required configuration"""
    code = "configuration_error"

    def __init__(self, message: str = "Service is not configured"):
        super().__init__(message)


async def minicrm_exception_handler(request: Request, exc: MiniCRMException) -> JSONResponse:
    """Render domain exceptions as JSON error bodies."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


# Raise helpers
def raise_not_found(resource: str = "Resource", resource_id: str = None):
    """Raise 404 NotFoundError"""
    raise NotFoundError(resource, resource_id)


def raise_already_exists(resource: str = "Resource", field: str = None, value: str = None):
    """Raise 409 AlreadyExistsError"""
    raise AlreadyExistsError(resource, field, value)


def raise_unauthorized(message: str = "Could not validate credentials"):
    """Raise 401 AuthError"""
    raise AuthError(message)


def raise_forbidden(message: str = "You don't have permission to access this resource"):
    """Raise 403 ForbiddenError"""
    raise ForbiddenError(message)


def raise_validation_error(message: str = "Validation failed", field: str = None):
    """Raise 400 ValidationError"""
    raise ValidationError(message, field)
