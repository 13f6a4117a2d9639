"""Compose the public short URL handed back to clients."""

from typing import Mapping, Optional

from .headers import build_base_url, resolve_path_prefix


def build_short_url(short_code: str, base_url: str, path_prefix: str = "") -> str:
    """Join base URL, optional path prefix and short code with single slashes."""
    parts = [base_url.rstrip("/"), path_prefix.strip("/"), short_code]
    return "/".join(part for part in parts if part)


def short_url_for_request(
    short_code: str,
    headers: Mapping[str, str],
    fallback_base_url: str,
    configured_prefix: str = "",
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Short URL as the client sees it: proxy headers first, then the request, then config."""
    base_url = build_base_url(
        headers=headers,
        fallback_base_url=fallback_base_url,
        request_scheme=request_scheme,
        request_host=request_host,
    )
    return build_short_url(short_code, base_url, resolve_path_prefix(headers, configured_prefix))
