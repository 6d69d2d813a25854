"""
Custom exception classes for the car manager service.

Provides specific exceptions for validation, lookup and storage failures
so routes can translate each one into the right page state or API error.
"""

from typing import Any, Dict, Optional


class CarManagerException(Exception):
    """
    Base exception for all car manager errors.

    All custom exceptions should inherit from this class
    for consistent error handling.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize car manager exception.

        Args:
            message: Human-readable error message
            details: Additional context about the error
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class CarValidationException(CarManagerException):
    """
    Exception raised when car fields fail validation.

    The message is shown to the user verbatim, so it carries the rule
    text only (e.g. "Price must be at least 1").
    """

    def __init__(
        self,
        field_name: str,
        value: Any,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize validation exception.

        Args:
            field_name: Name of the field that failed validation
            value: The invalid value
            reason: User-facing explanation of the failed rule
            details: Additional context about the error
        """
        self.field_name = field_name
        self.value = value
        self.reason = reason
        super().__init__(reason, details)


class CarNotFoundException(CarManagerException):
    """Raised when no car with the requested ID exists."""

    def __init__(self, car_id: Any) -> None:
        self.car_id = car_id
        super().__init__(f"Car not found: {car_id}", {"car_id": car_id})


class StorageCorruptedException(CarManagerException):
    """
    Raised when the stored collection cannot be parsed.

    Only surfaces when the corrupt-data policy is "fail"; the default
    policy logs the problem and starts with an empty collection.
    """

    def __init__(
        self,
        key: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Stored data in slot '{key}' is malformed: {reason}", details)


class StorageWriteException(CarManagerException):
    """Raised when a storage slot cannot be written."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(
            f"Failed to write storage slot '{key}': {reason}",
            {"key": key, "reason": reason},
        )
