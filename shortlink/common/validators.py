"""Validation utilities for URL shortener."""

from urllib.parse import urlparse
from typing import Tuple

MAX_URL_LENGTH = 2048


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL.

    Only syntax is checked; the URL is stored exactly as given.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    if any(c.isspace() for c in url):
        return False, "URL must not contain whitespace"

    try:
        result = urlparse(url)

        # Check if scheme is http or https
        if result.scheme not in ["http", "https"]:
            return False, "URL must use http or https protocol"

        # Check if netloc (domain) exists
        if not result.netloc or not result.hostname:
            return False, "URL must have a valid domain"

        return True, ""

    except ValueError as e:
        return False, f"Invalid URL format: {str(e)}"
