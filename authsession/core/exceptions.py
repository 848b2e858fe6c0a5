"""
Custom exceptions for authentication session operations.

Every error raised by authsession derives from AuthSessionError so callers
can catch the whole family at once.
"""
from typing import Dict, Optional


class AuthSessionError(Exception):
    """Base exception for all authsession errors."""
    
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            status: HTTP status code (if available)
        """
        self.message = message
        self.status = status
        super().__init__(message)


class InvalidCredentials(AuthSessionError):
    """Login or registration rejected by the backend."""
    
    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        field_errors: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Global error message
            status: HTTP status code
            field_errors: Per-field messages keyed by form field name
        """
        self.field_errors = dict(field_errors or {})
        super().__init__(message, status)


class NetworkFailure(AuthSessionError):
    """Transport-level failure (connection refused, reset, timeout)."""
    pass


class APIError(AuthSessionError):
    """Non-success response that is not an authorization problem."""
    pass


class SessionExpired(AuthSessionError):
    """The session cannot be recovered; re-authentication is required."""
    pass


class UnauthorizedAfterRetry(SessionExpired):
    """A request was rejected with 401 again after its single retry."""
    pass


class BootstrapError(AuthSessionError):
    """Restoring a stored session failed for a reason worth retrying."""
    pass


class SessionStateError(AuthSessionError):
    """A mutation would have broken the session state invariants."""
    pass
