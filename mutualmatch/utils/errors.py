"""Custom exceptions for the mutualmatch library."""

from typing import Any, Dict, Optional


class MutualMatchError(Exception):
    """Base exception for all mutualmatch errors."""

    def __init__(self, message: str, status_code: int = 500, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the error with a message and optional details.

        Args:
            message (str): Error message describing what went wrong.
            status_code (int): HTTP-style status code associated with the error (default 500).
            details (Optional[Dict[str, Any]]): Additional context such as the operation and pair.
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(MutualMatchError):
    """Raised when there's an issue with the library configuration."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, 500, details)


class ValidationError(MutualMatchError):
    """Raised when input validation fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, 400, details)


class InvalidPairError(ValidationError):
    """Raised when a pair names the same user on both sides."""


class NotFoundError(MutualMatchError):
    """Raised when a match record does not exist for the requested pair."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, 404, details)


class AlreadyExistsError(MutualMatchError):
    """Raised by strict creation when the pair already has a record."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, 409, details)


class StoreError(MutualMatchError):
    """Raised when the match store fails for a reason outside the narrower kinds below."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, status_code: int = 500) -> None:
        super().__init__(message, status_code, details)


class StoreUnavailableError(StoreError):
    """Raised when the backing store is unreachable or timed out."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details, 503)


class ConflictingMutationError(StoreError):
    """Raised when a mutation collides with a concurrent structural change, e.g. the record was deleted."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details, 409)
