"""
Domain Exceptions
Error taxonomy surfaced by every core operation
"""

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """
    Base exception for all service-level errors

    Attributes:
        message: Human readable description
        error_code: Stable machine readable code
        details: Extra context for the caller
    """

    error_code = "SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# ============================================================================
# Resource Errors
# ============================================================================


class ResourceNotFoundError(ServiceError):
    """Referenced entity does not exist"""

    error_code = "NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ResourceAlreadyExistsError(ServiceError):
    """Uniqueness violation (username, email)"""

    error_code = "ALREADY_EXISTS"

    def __init__(self, resource_type: str, resource_id: Any, field: str = "id"):
        super().__init__(
            f"{resource_type} with {field} '{resource_id}' already exists",
            details={"resource_type": resource_type, "field": field},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ResourceConflictError(ServiceError):
    """Concurrent writers kept winning; the write was not applied"""

    error_code = "CONFLICT"

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} {resource_id} was modified concurrently, retry later",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(ServiceError):
    """Field length / enum / format violations"""

    error_code = "VALIDATION_FAILED"

    def __init__(self, message: str, field: Optional[str] = None, errors: Any = None):
        details: Dict[str, Any] = {}
        if field:
            details["field"] = field
        if errors:
            details["errors"] = errors
        super().__init__(message, details=details)
        self.field = field


class InvalidOperationError(ServiceError):
    """Request is well-formed but breaks a domain rule"""

    error_code = "INVALID_OPERATION"

    def __init__(self, message: str, **details: Any):
        super().__init__(message, details=details)


# ============================================================================
# Permission Errors
# ============================================================================


class PermissionDeniedError(ServiceError):
    """Actor lacks ownership or role for the operation"""

    error_code = "FORBIDDEN"

    def __init__(self, action: str, resource_type: str, resource_id: Any):
        super().__init__(
            f"Not allowed to {action} {resource_type} {resource_id}",
            details={
                "action": action,
                "resource_type": resource_type,
                "resource_id": resource_id,
            },
        )
        self.resource_id = resource_id


# ============================================================================
# Utility Functions
# ============================================================================

_HTTP_STATUS = {
    ResourceNotFoundError: 404,
    PermissionDeniedError: 403,
    InvalidOperationError: 400,
    ValidationError: 422,
    ResourceAlreadyExistsError: 409,
    ResourceConflictError: 409,
}


def error_to_http_status(error: ServiceError) -> int:
    """Status code a request layer would map this error to"""
    for error_type, status in _HTTP_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 500


def is_retryable_error(error: Exception) -> bool:
    """Only lost optimistic races are worth retrying as-is"""
    return isinstance(error, ResourceConflictError)
