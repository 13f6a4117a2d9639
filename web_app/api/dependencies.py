"""Request dependencies for API routes."""

import secrets
from typing import Optional

from fastapi import Header, HTTPException, Request, status


async def require_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(default=None),
) -> None:
    """Reject the request unless X-API-Key matches the configured key.

    No-op when no api_key is configured.
    """
    expected = request.app.state.config.api_key
    if not expected:
        return

    if x_api_key is None or not secrets.compare_digest(x_api_key.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
        )
