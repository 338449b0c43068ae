"""
Custom exceptions for Trade Journal.

Provides domain-specific exceptions with clear error messages and
support for structured error handling.
"""

from typing import Optional, Dict, Any


class TradeJournalError(Exception):
    """Base exception for all Trade Journal errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# ============================================================================
# Database Errors
# ============================================================================

class DatabaseError(TradeJournalError):
    """Database operation failed."""
    pass


class RecordNotFoundError(DatabaseError):
    """Database record not found."""
    pass


class DuplicateRecordError(DatabaseError):
    """Attempted to create a duplicate record."""
    pass


# ============================================================================
# Authentication Errors
# ============================================================================

class AuthenticationError(TradeJournalError):
    """Authentication failed."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password."""
    pass


class SessionExpiredError(AuthenticationError):
    """User session has expired or is missing."""
    pass


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigurationError(TradeJournalError):
    """Required configuration is missing or malformed."""
    pass


# ============================================================================
# Backend Errors
# ============================================================================

class BackendError(TradeJournalError):
    """The journal backend returned an unexpected response."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.status_code = status_code
