"""Header parsing utilities for building public short URLs behind a proxy."""

from typing import Dict, Mapping, Optional


def _lower_keys(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k.lower(): v for k, v in headers.items()}


def extract_forwarded_headers(headers: Mapping[str, str]) -> Dict[str, Optional[str]]:
    """Extract X-Forwarded-* headers from request.

    Args:
        headers: Request headers

    Returns:
        Dictionary with forwarded_proto, forwarded_host, forwarded_for, forwarded_prefix
    """
    headers_lower = _lower_keys(headers)

    return {
        "forwarded_proto": headers_lower.get("x-forwarded-proto"),
        "forwarded_host": headers_lower.get("x-forwarded-host"),
        "forwarded_for": headers_lower.get("x-forwarded-for"),
        "forwarded_prefix": headers_lower.get("x-forwarded-prefix"),
    }


def build_base_url(
    headers: Mapping[str, str],
    fallback_base_url: str,
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Build base URL from headers or fallback.

    Priority:
    1. X-Forwarded-Proto + X-Forwarded-Host
    2. Request scheme + host
    3. Fallback base URL from config

    Returns:
        Base URL without trailing slash (e.g., https://example.com)
    """
    forwarded = extract_forwarded_headers(headers)

    if forwarded["forwarded_proto"] and forwarded["forwarded_host"]:
        # First hop wins when a chain of proxies appended values
        proto = forwarded["forwarded_proto"].split(",")[0].strip()
        host = forwarded["forwarded_host"].split(",")[0].strip()
        return f"{proto}://{host}"

    if request_scheme and request_host:
        return f"{request_scheme}://{request_host}"

    return fallback_base_url.rstrip("/")


def resolve_path_prefix(headers: Mapping[str, str], configured_prefix: str = "") -> str:
    """Path prefix for short URLs: X-Forwarded-Prefix if a proxy set one, else config.

    Returns:
        Normalized prefix with leading slash and no trailing slash (e.g. '/s'), or ''
    """
    prefix = extract_forwarded_headers(headers)["forwarded_prefix"] or configured_prefix or ""
    prefix = prefix.strip().strip("/")
    return "/" + prefix if prefix else ""
