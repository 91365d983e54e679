"""
Custom Exceptions for CollabHub

Hierarchical exception classes for proper error handling across layers.
Denials (missing role or permission) and failures (backend errors) are kept
in separate branches so the API can answer them differently.
"""

from typing import Optional, Dict, Any


class CollabHubError(Exception):
    """Base exception for all CollabHub errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ValidationError(CollabHubError):
    """Raised when input validation fails."""
    pass


class AuthenticationError(CollabHubError):
    """Raised when the identity provider rejects a credential operation."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details, original_error)


class AuthenticationRequiredError(CollabHubError):
    """Raised when an operation needs a signed-in principal and there is none."""
    pass


class PermissionDeniedError(CollabHubError):
    """Raised when the current role lacks a required permission."""

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        permission: Optional[str] = None,
        role: Optional[str] = None,
    ):
        details = {}
        if permission:
            details["permission"] = permission
        if role:
            details["role"] = role
        super().__init__(message, details)


class DatabaseError(CollabHubError):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class NotFoundError(DatabaseError):
    """Raised when a requested resource is not found."""
    pass


class DuplicateError(DatabaseError):
    """Raised when attempting to create a duplicate resource."""
    pass


class InvalidTransitionError(CollabHubError):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Cannot change status from '{current}' to '{requested}'",
            details={"current": current, "requested": requested},
        )


class StorageError(CollabHubError):
    """Raised when object storage operations fail."""

    def __init__(
        self,
        message: str,
        bucket: Optional[str] = None,
        path: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if bucket:
            details["bucket"] = bucket
        if path:
            details["path"] = path
        super().__init__(message, details, original_error)


class ConfigurationError(CollabHubError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, details, original_error)
