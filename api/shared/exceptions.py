"""Shared exceptions for the Support Chat API."""
from typing import Any, Dict, Optional


class SupportChatException(Exception):
    """Base exception for the Support Chat API."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(SupportChatException):
    """Raised when client input is malformed."""

    status_code = 400

    def __init__(self, message: str, error_code: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class NotFoundError(SupportChatException):
    """Raised when a resource is not found."""

    status_code = 404

    def __init__(self, message: str, error_code: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class StorageError(SupportChatException):
    """Raised when persistence operations fail.

    The message is user-facing; the underlying cause belongs in ``details``
    and is only ever logged.
    """

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "INTERNAL_ERROR", details)
