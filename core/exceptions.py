"""
Exception Definitions - Custom exceptions for Wellness Companion
================================================================

This module defines all custom exceptions used throughout the application,
providing clear error handling and meaningful error messages.
"""


class WellnessError(Exception):
    """
    Base exception for all Wellness Companion errors.

    All custom exceptions in this application inherit from this base class,
    allowing for easy catching of all application-specific errors.

    Attributes:
        message (str): Human-readable error description
        details (dict): Additional error details for debugging
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            details: Optional dictionary with additional error context
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return formatted error message with details if present."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(WellnessError):
    """
    Configuration-related errors.

    Raised when there are issues with:
    - Invalid configuration values
    - Configuration parsing errors
    - Malformed response pattern files
    """
    pass


class DatabaseError(WellnessError):
    """
    Storage operation errors.

    Raised when there are issues with:
    - Database connection failures
    - Query execution errors
    - Data integrity violations
    """
    pass


class ValidationError(WellnessError):
    """
    Invalid user input.

    Raised when a chat message, mood entry or journal entry
    does not satisfy its field constraints.
    """
    pass


class NotFoundError(WellnessError):
    """Raised when a session, mood or journal entry does not exist."""
    pass
