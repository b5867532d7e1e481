"""Custom exceptions for LinkTrace.

Provides a hierarchy of exceptions for different error types.
All LinkTrace exceptions inherit from LinkTraceException.
"""

from typing import Any, Dict, Optional


class LinkTraceException(Exception):
    """Base exception for all LinkTrace errors.
    
    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """
    
    def __init__(
        self,
        message: str,
        code: str = "LINKTRACE_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(LinkTraceException):
    """Raised when configuration is invalid or missing."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIG_ERROR", details=details)


class SessionNotFoundError(LinkTraceException):
    """Raised when a tracking id is unknown, expired or deleted."""
    
    def __init__(
        self,
        session_id: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["session_id"] = session_id
        self.session_id = session_id
        super().__init__(
            f"Tracking session not found: {session_id}",
            code="SESSION_NOT_FOUND",
            details=details,
        )


class EnrichmentError(LinkTraceException):
    """Raised when reverse geocoding fails."""
    
    def __init__(
        self,
        message: str,
        provider: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["provider"] = provider
        super().__init__(message, code="ENRICHMENT_ERROR", details=details)
