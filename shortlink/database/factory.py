"""Build a mapping store from a connection URL."""

import logging
from typing import Optional
from urllib.parse import urlparse

from ..errors import ConfigurationError
from .base import MappingStoreBase
from .memory import InMemoryMappingStore
from .postgres import PostgresMappingStore
from .sqlite import SQLiteMappingStore


def sqlite_path_from_url(database_url: str) -> str:
    """Extract the file path from a sqlite URL.

    ``sqlite:///data/urls.db`` is relative to the working directory,
    ``sqlite:////var/lib/urls.db`` is absolute.
    """
    path = database_url[len("sqlite://"):]
    if path.startswith("/"):
        path = path[1:]
    if not path or path == ":memory:":
        raise ConfigurationError(
            f"SQLite URL needs a database file path: {database_url!r} (use memory:// for an in-memory store)"
        )
    return path


def create_store(
    database_url: str,
    create_if_missing: bool = True,
    pool_size: int = 5,
    timeout_seconds: int = 30,
    logger: Optional[logging.Logger] = None,
) -> MappingStoreBase:
    """Create an (unopened) store for the URL's scheme.

    Args:
        database_url: sqlite:///path, postgresql://..., or memory://
        create_if_missing: Create the database/table if absent
        pool_size: Connection pool size
        timeout_seconds: Connection timeout in seconds
        logger: Optional logger instance

    Returns:
        Store instance; call ``open()`` before use

    Raises:
        ConfigurationError: If the scheme is not supported
    """
    scheme = urlparse(database_url).scheme.lower()

    if scheme == "sqlite":
        return SQLiteMappingStore(
            db_config=sqlite_path_from_url(database_url),
            pool_size=pool_size,
            timeout_seconds=timeout_seconds,
            create_if_missing=create_if_missing,
            logger=logger,
        )

    if scheme in ("postgresql", "postgres"):
        return PostgresMappingStore(
            db_config=database_url,
            pool_max_size=pool_size,
            connection_timeout_seconds=timeout_seconds,
            create_if_missing=create_if_missing,
            logger=logger,
        )

    if scheme == "memory":
        return InMemoryMappingStore(db_config=database_url, logger=logger)

    raise ConfigurationError(f"Unsupported database URL scheme: {scheme or database_url!r}")
