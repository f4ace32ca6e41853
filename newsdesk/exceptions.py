"""
Custom Exception Classes for Newsdesk

This module defines the error taxonomy shared by the permission engine,
the publication state machine and the HTTP layer. Every error carries an
HTTP status code and a machine-readable ``error_code`` so the exception
handlers can render a consistent response.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes exposed in error responses."""

    # Authentication & authorization
    AUTH_FAILED = "AUTH_FAILED"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"
    AUTH_ROLE_LOCKED = "AUTH_ROLE_LOCKED"

    # Permission catalog & roles
    PERMISSION_INVALID = "PERMISSION_INVALID"
    PERMISSION_DATA_CORRUPT = "PERMISSION_DATA_CORRUPT"
    ROLE_NOT_FOUND = "ROLE_NOT_FOUND"
    ROLE_IN_USE = "ROLE_IN_USE"

    # Resources
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_USER_NOT_FOUND = "RESOURCE_USER_NOT_FOUND"
    RESOURCE_CONTENT_NOT_FOUND = "RESOURCE_CONTENT_NOT_FOUND"

    # Publication workflow
    CONTENT_INVALID_TRANSITION = "CONTENT_INVALID_TRANSITION"
    CONTENT_SCHEDULE_IN_PAST = "CONTENT_SCHEDULE_IN_PAST"

    # Validation
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_DUPLICATE_RESOURCE = "VALIDATION_DUPLICATE_RESOURCE"

    # Infrastructure
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class CMSError(Exception):
    """Base exception class for all newsdesk errors"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(CMSError):
    """Raised when the request carries no usable identity"""

    def __init__(self, message: str = "Not authorized", details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
            error_code=ErrorCode.AUTH_FAILED,
        )


class InvalidTokenError(AuthenticationError):
    """Raised when the bearer token cannot be decoded"""

    def __init__(self, message: str = "Invalid or malformed token"):
        super().__init__(message=message)
        self.error_code = ErrorCode.AUTH_TOKEN_INVALID


class AuthorizationError(CMSError):
    """Raised when the identity lacks the permissions an action requires"""

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        required_permission: Any | None = None,
    ):
        details = {"required_permission": required_permission} if required_permission else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
            error_code=ErrorCode.AUTH_PERMISSION_DENIED,
        )


class RoleLockedError(CMSError):
    """Raised on any attempt to update or delete the default or superuser role"""

    def __init__(self, role_id: Any):
        super().__init__(
            message="You cannot delete or update the default or superuser role",
            status_code=status.HTTP_403_FORBIDDEN,
            details={"role_id": role_id},
            error_code=ErrorCode.AUTH_ROLE_LOCKED,
        )


# ============================================================================
# Permission Catalog & Role Exceptions
# ============================================================================


class InvalidPermissionError(CMSError):
    """Raised when a permission id is not part of the catalog"""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            message=f"Invalid permission value: {value!r}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"permission": repr(value)},
            error_code=ErrorCode.PERMISSION_INVALID,
        )


class CorruptPermissionDataError(CMSError):
    """
    Raised when a stored role or user overlay holds an id outside the catalog.

    The value came from the database, not the caller, so it is a server error.
    """

    def __init__(self, value: Any, role_id: Any | None = None, user_id: Any | None = None):
        super().__init__(
            message=f"Stored permission data holds an unknown value: {value!r}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"permission": repr(value), "role_id": role_id, "user_id": user_id},
            error_code=ErrorCode.PERMISSION_DATA_CORRUPT,
        )


class RoleNotFoundError(CMSError):
    """
    Raised when a user references a role that does not exist.

    This is a data inconsistency, not a caller mistake, so it surfaces as a
    server error.
    """

    def __init__(self, role_id: Any | None = None, user_id: Any | None = None):
        super().__init__(
            message=f"Role '{role_id}' referenced by user '{user_id}' does not exist",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"role_id": role_id, "user_id": user_id},
            error_code=ErrorCode.ROLE_NOT_FOUND,
        )


class RoleInUseError(CMSError):
    """Raised when deleting a role that users still reference"""

    def __init__(self, role_id: Any, user_count: int):
        super().__init__(
            message=f"Role '{role_id}' is still assigned to {user_count} user(s)",
            status_code=status.HTTP_409_CONFLICT,
            details={"role_id": role_id, "user_count": user_count},
            error_code=ErrorCode.ROLE_IN_USE,
        )


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class ResourceNotFoundError(CMSError):
    """Base class for resource not found errors"""

    def __init__(
        self,
        resource_type: str,
        resource_id: Any | None = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
    ):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
            error_code=error_code,
        )


class UserNotFoundError(ResourceNotFoundError):
    """Raised when a user is not found"""

    def __init__(self, user_id: Any | None = None):
        super().__init__(resource_type="User", resource_id=user_id, error_code=ErrorCode.RESOURCE_USER_NOT_FOUND)


class ContentNotFoundError(ResourceNotFoundError):
    """Raised when a blog or edition is not found"""

    def __init__(self, resource_type: str = "Content", content_id: Any | None = None):
        super().__init__(
            resource_type=resource_type,
            resource_id=content_id,
            error_code=ErrorCode.RESOURCE_CONTENT_NOT_FOUND,
        )


# ============================================================================
# Validation & Workflow Exceptions
# ============================================================================


class ValidationError(CMSError):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=error_details,
            error_code=ErrorCode.VALIDATION_FAILED,
        )


class DuplicateResourceError(CMSError):
    """Raised when attempting to create a duplicate resource"""

    def __init__(self, resource_type: str, field: str, value: Any):
        super().__init__(
            message=f"{resource_type} with {field} '{value}' already exists",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource_type": resource_type, "field": field, "value": value},
            error_code=ErrorCode.VALIDATION_DUPLICATE_RESOURCE,
        )


class InvalidStatusTransitionError(CMSError):
    """Raised when a content item is not in a state the transition accepts"""

    def __init__(self, current_status: str, target_status: str, resource_type: str = "Content"):
        super().__init__(
            message=f"Cannot transition {resource_type} from '{current_status}' to '{target_status}'",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource_type": resource_type, "current_status": current_status, "target_status": target_status},
            error_code=ErrorCode.CONTENT_INVALID_TRANSITION,
        )


class SchedulingViolationError(CMSError):
    """Raised when content is approved for a publish time that is not in the future"""

    def __init__(self, scheduled_at: Any):
        super().__init__(
            message="You can't change the past. The publish time should be somewhere in the future.",
            status_code=status.HTTP_418_IM_A_TEAPOT,
            details={"scheduled_at": str(scheduled_at)},
            error_code=ErrorCode.CONTENT_SCHEDULE_IN_PAST,
        )


# ============================================================================
# Database Exceptions
# ============================================================================


class DatabaseError(CMSError):
    """Raised when a store operation fails; the change it belonged to was not applied"""

    def __init__(self, message: str = "A database error occurred", operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code=ErrorCode.DATABASE_ERROR,
        )
