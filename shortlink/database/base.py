"""Abstract base class for URL mapping store implementations."""

from abc import ABC, abstractmethod
from typing import Optional

from .models import InsertResult


class MappingStoreBase(ABC):
    """Abstract base class for URL mapping storage.

    Implementations must make ``insert`` atomic with respect to the
    uniqueness of ``short_code``: of two concurrent inserts under the same
    code exactly one returns ``InsertResult.CREATED``. Mappings are never
    updated or deleted.
    """

    backend: str = "unknown"

    def __init__(self, db_config: str):
        """Initialize store.

        Args:
            db_config: Database connection string
        """
        self.db_config = db_config

    @abstractmethod
    async def open(self) -> None:
        """Establish connections and, if configured, create the schema.

        Raises:
            StorageError: If the store cannot be established
        """
        pass

    @abstractmethod
    async def insert(self, short_code: str, original_url: str) -> InsertResult:
        """Create a new short URL mapping.

        Args:
            short_code: The short code to use
            original_url: The original long URL, stored verbatim

        Returns:
            InsertResult.CREATED, or InsertResult.CONFLICT if short_code
            already exists (the stored URL is left unchanged)

        Raises:
            StorageError: On any other engine failure
        """
        pass

    @abstractmethod
    async def get(self, short_code: str) -> Optional[str]:
        """Get the original URL for a short code.

        Args:
            short_code: The short code to lookup

        Returns:
            The original URL if found, None otherwise

        Raises:
            StorageError: On engine failure
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored mappings."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is healthy.

        Returns:
            True if healthy, False otherwise
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close database connections."""
        pass
