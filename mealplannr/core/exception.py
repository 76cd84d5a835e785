from fastapi import HTTPException
from typing import Any, Optional
from mealplannr.schemas.result import ErrorCategory


class CustomException(HTTPException):
    """Base exception class for all custom application exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int,
        category: ErrorCategory,
        code: Optional[str] = None,
        headers: Optional[dict] = None
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.category = category
        self.code = code

    @property
    def message(self) -> str:
        return self.detail

    def __str__(self) -> str:
        return self.detail


class ResourceNotFoundException(CustomException):
    """Exception raised when a requested resource is not found"""

    def __init__(self, resource_name: str, resource_id: Optional[Any] = None, code: str = "NotFound"):
        if resource_id:
            message = f"{resource_name} with ID '{resource_id}' was not found."
        else:
            message = f"{resource_name} was not found."

        super().__init__(
            message=message,
            status_code=404,
            category=ErrorCategory.NOT_FOUND,
            code=code
        )


class AuthenticationException(CustomException):
    """Exception raised when authentication fails"""

    def __init__(self, message: str = "Invalid credentials. Access denied."):
        super().__init__(
            message=message,
            status_code=401,
            category=ErrorCategory.AUTHENTICATION,
            code="NotAuthenticated",
            headers={"WWW-Authenticate": "Bearer"}
        )


class AuthorizationException(CustomException):
    """Exception raised when user lacks required permissions"""

    def __init__(
        self,
        message: Optional[str] = None,
        permission: Optional[str] = None,
        code: str = "NotAuthorized"
    ):
        if message:
            error_message = message
        elif permission:
            error_message = f"You do not have permission to perform this action. Required permission: {permission}"
        else:
            error_message = "You do not have permission to perform this action."

        super().__init__(
            message=error_message,
            status_code=403,
            category=ErrorCategory.AUTHORIZATION,
            code=code
        )


class ConflictException(CustomException):
    """Exception raised when a request collides with the current state of a resource"""

    def __init__(self, message: str, code: str = "Conflict"):
        super().__init__(
            message=message,
            status_code=400,
            category=ErrorCategory.RESOURCE_CONFLICT,
            code=code
        )


class ValidationException(CustomException):
    """Exception raised for business logic validation failures"""

    def __init__(self, message: str, field: Optional[str] = None, code: str = "InvalidInput"):
        if field:
            error_message = f"Validation failed for '{field}': {message}"
        else:
            error_message = f"Validation failed: {message}"

        super().__init__(
            message=error_message,
            status_code=400,
            category=ErrorCategory.VALIDATION,
            code=code
        )


class PersistenceException(CustomException):
    """Exception raised when a database write fails"""

    def __init__(self, message: str = "Failed to save changes."):
        super().__init__(
            message=message,
            status_code=500,
            category=ErrorCategory.PERSISTENCE,
            code="PersistenceError"
        )
