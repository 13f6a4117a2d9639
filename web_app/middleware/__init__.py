"""Middleware for URL shortener web app."""

from .logging import LoggingMiddleware
from .rate_limit import FixedWindowRateLimiter, RateLimitMiddleware
from .request_id import RequestIdMiddleware

__all__ = [
    "LoggingMiddleware",
    "FixedWindowRateLimiter",
    "RateLimitMiddleware",
    "RequestIdMiddleware",
]
