"""Custom exception hierarchy for the category tree service."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Category errors
    NOT_FOUND = "NOT_FOUND"
    INVALID_MOVE = "INVALID_MOVE"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Store errors
    STORE_FAILURE = "STORE_FAILURE"
    PATH_MAINTENANCE_FAILURE = "PATH_MAINTENANCE_FAILURE"

    # Auth
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"


class CategoryTreeError(Exception):
    """
    Base exception for all category tree errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class NotFoundError(CategoryTreeError):
    """Referenced category (moving, reference or parent) does not exist."""

    def __init__(self, category_id: str):
        super().__init__(
            f"Category not found: {category_id}",
            ErrorCode.NOT_FOUND,
            status_code=404,
            details={"category_id": category_id}
        )


class ForbiddenError(CategoryTreeError):
    """Requester may not mutate this category (not the owner, or a shared node)."""

    def __init__(
        self,
        message: str = "You do not have permission to modify this category",
        category_id: Optional[str] = None,
    ):
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
            details={"category_id": category_id} if category_id else {},
        )


class InvalidMoveError(CategoryTreeError):
    """Move would create a cycle, or the reference is not where the move expects it."""

    def __init__(self, message: str, category_id: str, reference_id: Optional[str] = None):
        details = {"category_id": category_id}
        if reference_id:
            details["reference_id"] = reference_id
        super().__init__(
            message,
            ErrorCode.INVALID_MOVE,
            status_code=400,
            details=details,
        )


class ValidationError(CategoryTreeError):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class StoreFailureError(CategoryTreeError):
    """The node store rejected or failed a read/write. Nothing was applied."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.STORE_FAILURE,
            status_code=500,
            details=details
        )


class PathMaintenanceError(CategoryTreeError):
    """Materialized path fix-up failed. Logged by callers, never surfaced."""

    def __init__(self, category_id: str, reason: str):
        super().__init__(
            f"Path maintenance failed for {category_id}: {reason}",
            ErrorCode.PATH_MAINTENANCE_FAILURE,
            status_code=500,
            details={"category_id": category_id},
        )


class AuthenticationError(CategoryTreeError):
    """Request lacks valid authentication credentials."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )
