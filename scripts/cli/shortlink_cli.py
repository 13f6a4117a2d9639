#!/usr/bin/env python3
"""
Command-line interface for the shortlink service.

Talks to the mapping store directly, not over HTTP.

Usage:
    python shortlink_cli.py shorten <url>
    python shortlink_cli.py resolve <short_code>
    python shortlink_cli.py stats
    python shortlink_cli.py health
"""

import argparse
import asyncio
import json
import sys
import os
from typing import Optional

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from config import Config, load_config
from shortlink.database.factory import create_store
from shortlink.database.cache import RedisCache
from shortlink.errors import ShortenerError
from shortlink.service import URLShortenerService
from shortlink.shortcode import ShortCodeGenerator
from shortlink.common.logging_config import setup_logging


def _print_json(payload: dict, error: bool = False) -> None:
    print(json.dumps(payload, indent=2), file=sys.stderr if error else sys.stdout)


class ShortlinkCLI:
    """Command-line interface for URL shortener."""

    def __init__(self, config: Config, verbose: bool = False):
        """Initialize CLI from application config."""
        self.config = config
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.service: Optional[URLShortenerService] = None

    async def initialize(self):
        """Open the store and build the service."""
        db = create_store(
            self.config.database_url,
            create_if_missing=self.config.database_create_if_missing,
            pool_size=1,
            timeout_seconds=self.config.database_timeout_seconds,
            logger=self.logger,
        )
        await db.open()

        cache = None
        if self.config.redis_url:
            cache = RedisCache(
                redis_url=self.config.redis_url,
                ttl_seconds=self.config.cache_ttl_seconds,
                logger=self.logger,
            )
            await cache.connect()

        self.service = URLShortenerService(
            db=db,
            cache=cache,
            short_code_generator=ShortCodeGenerator(default_length=self.config.short_code_length),
            logger=self.logger,
            max_attempts=self.config.max_shorten_attempts,
        )

    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()

    async def shorten(self, url: str) -> int:
        """Shorten a URL."""
        try:
            short_code = await self.service.shorten(url)
        except ShortenerError as e:
            _print_json({"success": False, "error": e.message}, error=True)
            return 1

        _print_json({
            "success": True,
            "short_code": short_code,
            "original_url": url,
        })
        return 0

    async def resolve(self, short_code: str) -> int:
        """Get original URL for a short code."""
        try:
            original_url = await self.service.resolve(short_code)
        except ShortenerError as e:
            _print_json({"success": False, "error": e.message}, error=True)
            return 1

        _print_json({
            "success": True,
            "short_code": short_code,
            "original_url": original_url,
        })
        return 0

    async def stats(self) -> int:
        """Print store statistics."""
        try:
            stats = await self.service.get_statistics()
        except ShortenerError as e:
            _print_json({"success": False, "error": e.message}, error=True)
            return 1

        _print_json({"success": True, "statistics": stats})
        return 0

    async def health(self) -> int:
        """Check service health."""
        health_status = await self.service.health_check()
        _print_json({"success": health_status["overall"], "health": health_status})
        return 0 if health_status["overall"] else 1


def cli_config(args: argparse.Namespace) -> Config:
    """Application config with command-line flags applied on top."""
    config = load_config()

    overrides = {}
    if args.db_url:
        overrides["database_url"] = args.db_url
    if args.redis_url:
        overrides["redis_url"] = args.redis_url
    if args.no_create:
        overrides["database_create_if_missing"] = False

    return config.model_copy(update=overrides)


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="shortlink CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten a URL
  %(prog)s shorten https://example.com/long/url

  # Look up a short code
  %(prog)s resolve AbC123

  # Count stored mappings
  %(prog)s stats

  # Check health
  %(prog)s health
        """
    )

    parser.add_argument(
        "--db-url",
        help="Mapping store URL (default: DATABASE_URL from env or .env)"
    )
    parser.add_argument(
        "--redis-url",
        help="Redis connection URL (default: REDIS_URL from env or .env)"
    )
    parser.add_argument(
        "--no-create",
        action="store_true",
        help="Fail instead of creating the database if it does not exist"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")

    resolve_parser = subparsers.add_parser("resolve", help="Get original URL")
    resolve_parser.add_argument("short_code", help="Short code to lookup")

    subparsers.add_parser("stats", help="Show store statistics")
    subparsers.add_parser("health", help="Check store health")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    cli = ShortlinkCLI(config=cli_config(args), verbose=args.verbose)

    try:
        await cli.initialize()
    except ShortenerError as e:
        _print_json({"success": False, "error": e.message}, error=True)
        return 1

    try:
        if args.command == "shorten":
            return await cli.shorten(args.url)
        elif args.command == "resolve":
            return await cli.resolve(args.short_code)
        elif args.command == "stats":
            return await cli.stats()
        elif args.command == "health":
            return await cli.health()
        else:
            parser.print_help()
            return 1
    finally:
        await cli.cleanup()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
