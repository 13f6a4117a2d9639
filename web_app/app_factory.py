"""FastAPI application factory."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shortlink.common.logging_config import get_logger
from shortlink.errors import ShortenerError

from .api import api_router
from .web import web_router
from .middleware import (
    FixedWindowRateLimiter,
    LoggingMiddleware,
    RateLimitMiddleware,
    RequestIdMiddleware,
)

logger = get_logger("web")


async def shortener_error_handler(request: Request, exc: ShortenerError) -> JSONResponse:
    """Convert service errors to JSON error responses."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} in {request.url.path}: {exc.message}", exc_info=exc)
    else:
        logger.info(f"{type(exc).__name__} in {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "detail": exc.details or None},
    )


def create_app(
    db_instance,
    cache_instance,
    service_instance,
    config,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        db_instance: Mapping store instance
        cache_instance: Cache instance
        service_instance: Service instance
        config: Configuration instance

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="shortlink",
        description="URL shortening service",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Shared, read-only handles for every request task
    app.state.db = db_instance
    app.state.cache = cache_instance
    app.state.service = service_instance
    app.state.config = config

    app.add_exception_handler(ShortenerError, shortener_error_handler)

    # Added innermost first: request IDs wrap everything, CORS sits closest to the routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if config.rate_limit_per_minute > 0:
        app.add_middleware(
            RateLimitMiddleware,
            limiter=FixedWindowRateLimiter(limit=config.rate_limit_per_minute, window_seconds=60),
        )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(web_router, tags=["Web"])

    return app
