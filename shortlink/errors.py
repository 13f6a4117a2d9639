"""
Error classes for the URL shortener.

Each error carries the HTTP status it maps to so the web layer can turn
any of them into a consistent JSON error response.
"""

from typing import Optional, Dict, Any


class ShortenerError(Exception):
    """
    Base error class.

    Attributes:
        status_code: HTTP status code (default: 500)
        message: Error message (default: "Internal server error")
        details: Optional additional error details
    """
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """
        Initialize error.

        Args:
            message: Error message (overrides default)
            details: Optional additional error details
        """
        self.message = message or self.message
        self.details = details or {}
        super().__init__(self.message)


class InvalidUrlError(ShortenerError):
    """400 URL failed validation; never reaches the store."""
    status_code = 400
    message = "Invalid URL"


class NotFoundError(ShortenerError):
    """404 No mapping exists for the short code."""
    status_code = 404
    message = "Short code not found"


class RetriesExhaustedError(ShortenerError):
    """503 Every generated short code collided with an existing one."""
    status_code = 503
    message = "Unable to allocate a unique short code"


class StorageError(ShortenerError):
    """500 Storage engine failure other than a short code conflict."""
    status_code = 500
    message = "Storage failure"


class ConfigurationError(ShortenerError):
    """Invalid configuration detected at startup."""
    status_code = 500
    message = "Invalid configuration"
