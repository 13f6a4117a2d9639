"""API routes implementation."""

from fastapi import APIRouter, Depends, Request
from datetime import datetime, timezone

from .dependencies import require_api_key
from .schemas import (
    ShortenRequest,
    ShortenResponse,
    URLInfoResponse,
    HealthResponse,
    ErrorResponse,
    StatisticsResponse,
)
from shortlink.common.url_builder import short_url_for_request

router = APIRouter()


def public_short_url(request: Request, short_code: str) -> str:
    """Build the short URL as seen by the client (proxy headers, then config)."""
    config = request.app.state.config

    return short_url_for_request(
        short_code,
        headers=dict(request.headers),
        fallback_base_url=config.base_url,
        configured_prefix=config.path_prefix,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    dependencies=[Depends(require_api_key)],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid URL"},
        401: {"description": "Missing or invalid API key"},
        500: {"model": ErrorResponse, "description": "Storage failure"},
        503: {"model": ErrorResponse, "description": "No unique short code could be allocated"},
    },
    summary="Create short URL",
    description="Create a shortened URL with a randomly generated short code.",
)
async def shorten_url(request: Request, body: ShortenRequest):
    """Create a shortened URL."""
    service = request.app.state.service

    short_code = await service.shorten(body.url)

    return ShortenResponse(
        short_code=short_code,
        short_url=public_short_url(request, short_code),
        original_url=body.url,
    )


@router.get(
    "/urls/{short_code}",
    response_model=URLInfoResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Short code not found"},
    },
    summary="Get URL information",
    description="Get the original URL behind a short code without redirecting.",
)
async def get_url_info(request: Request, short_code: str):
    """Get information about a shortened URL."""
    service = request.app.state.service

    mapping = await service.get_url_info(short_code)

    return URLInfoResponse(
        short_code=mapping.short_code,
        short_url=public_short_url(request, mapping.short_code),
        original_url=mapping.original_url,
    )


@router.get(
    "/stats",
    response_model=StatisticsResponse,
    summary="Get statistics",
    description="Get service-wide statistics.",
)
async def get_statistics(request: Request):
    """Get service statistics."""
    service = request.app.state.service

    stats = await service.get_statistics()

    return StatisticsResponse(**stats)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
