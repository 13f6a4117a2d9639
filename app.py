#!/usr/bin/env python3
"""
Main entry point for the shortlink URL shortener service.

Concurrency: The server handles multiple connections simultaneously via async I/O
(FastAPI + a pooled mapping store + redis.asyncio). Set WORKERS > 1 for
multi-process scaling across CPU cores: uvicorn then imports `app:build_app` in
each worker process, and every worker opens its own pool.

Usage:
    python app.py

Environment variables:
    DATABASE_URL - sqlite:///path, postgresql://..., or memory://
    DATABASE_CREATE_IF_MISSING - Create database/table if absent (default true)
    REDIS_URL - Redis connection URL (optional)
    BASE_URL - Base URL for short links
    API_KEY - Require X-API-Key on POST /api/shorten (optional)
    RATE_LIMIT_PER_MINUTE - Per-client request limit (0 disables)
    PORT - Port to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from shortlink.database.factory import create_store
from shortlink.database.cache import RedisCache
from shortlink.service import URLShortenerService
from shortlink.shortcode import ShortCodeGenerator
from shortlink.common.logging_config import setup_logging
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the store, cache and service on startup; close them on shutdown.

    A store that cannot be opened aborts startup.
    """
    config: Config = app.state.config
    logger = app.state.logger

    logger.info("Starting URL shortener service...")

    db = create_store(
        config.database_url,
        create_if_missing=config.database_create_if_missing,
        pool_size=config.database_pool_size,
        timeout_seconds=config.database_timeout_seconds,
        logger=logger,
    )
    await db.open()
    logger.info(f"Mapping store ready ({db.backend})")

    if config.redis_url:
        logger.info(f"Connecting to Redis at {config.redis_url}")
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            logger=logger,
        )
        await cache.connect()
    else:
        logger.info("Redis caching disabled")
        cache = None

    service = URLShortenerService(
        db=db,
        cache=cache,
        short_code_generator=ShortCodeGenerator(default_length=config.short_code_length),
        logger=logger,
        max_attempts=config.max_shorten_attempts,
    )

    app.state.db = db
    app.state.cache = cache
    app.state.service = service

    logger.info("Service started successfully")

    try:
        yield
    finally:
        logger.info("Shutting down URL shortener service...")
        await service.close()
        logger.info("Service stopped")


def build_app(config: Optional[Config] = None) -> FastAPI:
    """Build the app with logging set up and the lifespan installed.

    Also the factory uvicorn imports in each worker process when WORKERS > 1.
    """
    config = config or load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    # Store, cache and service are attached in lifespan
    app = create_app(
        db_instance=None,
        cache_instance=None,
        service_instance=None,
        config=config,
    )
    app.state.logger = logger
    app.router.lifespan_context = lifespan
    return app


def main():
    """Main entry point."""
    config = load_config()
    app = build_app(config)
    logger = app.state.logger

    logger.info("shortlink URL shortener")
    logger.info(f"Configuration: {config.model_dump(exclude={'api_key'})}")

    if config.workers > 1:
        # Worker processes can only be spawned from an import string
        logger.info(f"Starting {config.workers} workers on {config.host}:{config.port}")
        uvicorn.run(
            "app:build_app",
            factory=True,
            host=config.host,
            port=config.port,
            workers=config.workers,
            log_level=config.log_level.lower(),
            access_log=False,
        )
        return

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,  # LoggingMiddleware logs every request
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
