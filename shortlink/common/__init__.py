"""Common utilities for URL shortener."""

from .validators import is_valid_url
from .headers import extract_forwarded_headers, build_base_url, resolve_path_prefix
from .url_builder import build_short_url, short_url_for_request
from .logging_config import setup_logging, get_logger
from .request_context import generate_request_id, get_request_id, set_request_id

__all__ = [
    "is_valid_url",
    "extract_forwarded_headers",
    "build_base_url",
    "resolve_path_prefix",
    "build_short_url",
    "short_url_for_request",
    "setup_logging",
    "get_logger",
    "generate_request_id",
    "get_request_id",
    "set_request_id",
]
