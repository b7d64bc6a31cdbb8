"""
Error definitions for the record stores.

Every store operation raises one of these, with the driver exception chained
as ``__cause__`` where there is one.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class AppError(Exception):
    """Base class for availit errors."""

    def __init__(
        self,
        message: str,
        error_type: str = "app_error",
        code: str = "internal_error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.code,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


class NotFoundError(AppError):
    """Raised when an update targets an identifier the store does not hold."""

    def __init__(
        self,
        message: str = "Record not found",
        code: str = "not_found",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_type="not_found_error", code=code, details=details)


class ConflictError(AppError):
    """
    Raised when the medium detects a concurrent modification (version
    mismatch) or rejects a write on an integrity constraint.
    """

    def __init__(
        self,
        message: str = "Record conflict",
        code: str = "conflict",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_type="conflict_error", code=code, details=details)


class StoreUnavailableError(AppError):
    """Raised when the backing medium cannot be reached."""

    def __init__(
        self,
        message: str = "Backing store unavailable",
        code: str = "store_unavailable",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_type="store_unavailable_error", code=code, details=details)


class ValidationError(AppError):
    """Raised for invalid paging/sort arguments or invalid entity input."""

    def __init__(
        self,
        message: str = "Validation failed",
        code: str = "validation_error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_type="validation_error", code=code, details=details)
