"""
Custom exception classes for the storage service
"""
from typing import Optional, Dict, Any, List


class RoastStorageException(Exception):
    """Base exception for the resume roast storage service"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(RoastStorageException):
    """Resource not found errors"""

    def __init__(self, resource: str, identifier: Optional[str] = None):
        message = f"{resource} not found"
        if identifier:
            message += f": {identifier}"
        super().__init__(message, status_code=404)


class ValidationError(RoastStorageException):
    """Input or record shape/range violations. Never retried."""

    def __init__(self, message: str = "Validation failed", errors: Optional[List[str]] = None):
        self.errors = list(errors or [])
        if self.errors:
            message = f"{message}: {', '.join(self.errors)}"
        super().__init__(message, status_code=422, details={"errors": self.errors})


class StorageError(RoastStorageException):
    """Backend write failure surfaced after retries are exhausted"""

    def __init__(
        self,
        message: str = "Storage operation failed",
        attempts: int = 0,
        last_error: Optional[BaseException] = None,
    ):
        self.attempts = attempts
        self.last_error = last_error
        details: Dict[str, Any] = {"attempts": attempts}
        if last_error is not None:
            message = f"{message}: {last_error}"
            details["last_error"] = str(last_error)
        super().__init__(message, status_code=503, details=details)


class ExtractionError(RoastStorageException):
    """Text extraction failures raised by upstream extractors"""

    def __init__(self, message: str = "Text extraction failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=422, details=details)
