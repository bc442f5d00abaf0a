"""
Custom Exception Classes for the Application
Provides a unified error handling system with proper HTTP status codes and messages.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class AppException(HTTPException):
    """
    Base exception class for all application exceptions.
    Provides consistent error response format.
    """

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(
            status_code=status_code,
            detail={
                "error_code": error_code,
                "message": message,
                "details": self.details,
            },
            headers=headers,
        )


# ==================== Authentication Exceptions ====================


class AuthenticationException(AppException):
    """Base class for authentication-related exceptions."""

    def __init__(
        self,
        error_code: str = "authentication_failed",
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=error_code,
            message=message,
            details=details,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthenticationRequiredException(AuthenticationException):
    """Raised when an action needs a signed-in actor and none was provided."""

    def __init__(self):
        super().__init__(
            error_code="authentication_required",
            message="Sign in required",
        )


class InvalidCredentialsException(AuthenticationException):
    """Raised when user provides invalid credentials."""

    def __init__(self):
        super().__init__(
            error_code="invalid_credentials",
            message="Invalid email or password",
        )


class InvalidTokenException(AuthenticationException):
    """Raised when authentication token is invalid or expired."""

    def __init__(self):
        super().__init__(
            error_code="invalid_token",
            message="Invalid authentication token",
        )


# ==================== Authorization Exceptions ====================


class PermissionDeniedException(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(
        self, message: str = "You don't have permission to perform this action"
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="permission_denied",
            message=message,
        )


class OwnershipRequiredException(PermissionDeniedException):
    """Raised when action requires resource ownership."""

    def __init__(self, resource: str):
        super().__init__(
            message=f"You must be the owner of this {resource} to perform this action"
        )


# ==================== Resource Exceptions ====================


class ResourceNotFoundException(AppException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Optional[Any] = None):
        details = {}
        if identifier is not None:
            details["identifier"] = str(identifier)

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="resource_not_found",
            message=f"{resource} not found",
            details=details,
        )


class ResourceAlreadyExistsException(AppException):
    """Raised when trying to create a resource that already exists."""

    def __init__(
        self,
        resource: str,
        field: Optional[str] = None,
        message: Optional[str] = None,
    ):
        details = {}
        if field:
            details["field"] = field

        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="resource_already_exists",
            message=message or f"{resource} already exists",
            details=details,
        )


class ResourceConflictException(AppException):
    """Raised when there's a conflict with the resource state."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="resource_conflict",
            message=message,
            details=details,
        )


# ==================== Validation Exceptions ====================


class ValidationException(AppException):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {}
        if field:
            details["field"] = field

        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="validation_error",
            message=message,
            details=details,
        )


# ==================== Business Logic Exceptions ====================


class BusinessLogicException(AppException):
    """Base class for business logic exceptions."""

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        super().__init__(
            status_code=status_code,
            error_code=error_code,
            message=message,
            details=details,
        )


class MaxAttemptsExceededException(BusinessLogicException):
    """Raised when a learner has used every allowed attempt on a quiz."""

    def __init__(self, max_attempts: int):
        super().__init__(
            error_code="max_attempts_exceeded",
            message="Maximum number of quiz attempts reached",
            details={"max_attempts": max_attempts},
            status_code=status.HTTP_409_CONFLICT,
        )


class CourseNotCompletedException(BusinessLogicException):
    """Raised when a certificate is requested for a course that isn't completed."""

    def __init__(self, course_id: int):
        super().__init__(
            error_code="course_not_completed",
            message="Complete the course before requesting a certificate",
            details={"course_id": course_id},
            status_code=status.HTTP_409_CONFLICT,
        )


class DiscussionLockedException(BusinessLogicException):
    """Raised when replying to a locked discussion."""

    def __init__(self, discussion_id: int):
        super().__init__(
            error_code="discussion_locked",
            message="This discussion is locked",
            details={"discussion_id": discussion_id},
            status_code=status.HTTP_409_CONFLICT,
        )


# ==================== External Service Exceptions ====================


class ExternalServiceException(AppException):
    """Raised when an external service fails."""

    def __init__(
        self,
        service_name: str,
        message: Optional[str] = None,
        status_code: int = status.HTTP_503_SERVICE_UNAVAILABLE,
        error_code: str = "external_service_error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status_code,
            error_code=error_code,
            message=message or f"{service_name} service is currently unavailable",
            details={"service": service_name, **(details or {})},
        )


class AIServiceException(ExternalServiceException):
    """Generic upstream AI failure (bad status, transport error, unparseable payload)."""

    def __init__(
        self,
        message: str = "AI service error",
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        upstream_status: Optional[int] = None,
    ):
        details = {}
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        super().__init__(
            "ai_gateway",
            message=message,
            status_code=status_code,
            error_code="ai_service_error",
            details=details,
        )


class AIRateLimitedException(ExternalServiceException):
    """Upstream AI provider answered 429."""

    def __init__(self):
        super().__init__(
            "ai_gateway",
            message="Rate limits exceeded, please try again later.",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error_code="ai_rate_limited",
        )


class AIQuotaExhaustedException(ExternalServiceException):
    """Upstream AI provider answered 402 (credits exhausted)."""

    def __init__(self):
        super().__init__(
            "ai_gateway",
            message="AI credits exhausted, please add funds to continue.",
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            error_code="ai_quota_exhausted",
        )


# ==================== Helper Functions ====================


def raise_not_found(resource: str, identifier: Optional[Any] = None):
    """Helper function to raise ResourceNotFoundException."""
    raise ResourceNotFoundException(resource, identifier)


def raise_validation_error(message: str, field: Optional[str] = None):
    """Helper function to raise ValidationException."""
    raise ValidationException(message, field)
