"""In-memory mapping store, used by tests and ``memory://`` deployments."""

import logging
from typing import Dict, Optional

from .base import MappingStoreBase
from .models import InsertResult


class InMemoryMappingStore(MappingStoreBase):
    """Dict-backed store.

    Check-and-set in ``insert`` runs without awaiting, so it is atomic with
    respect to every other task on the event loop.
    """

    backend = "memory"

    def __init__(self, db_config: str = "memory://", logger: Optional[logging.Logger] = None):
        super().__init__(db_config)
        self.logger = logger or logging.getLogger(__name__)
        self._mappings: Dict[str, str] = {}

    async def open(self) -> None:
        self.logger.debug("In-memory store ready")

    async def insert(self, short_code: str, original_url: str) -> InsertResult:
        if short_code in self._mappings:
            return InsertResult.CONFLICT
        self._mappings[short_code] = original_url
        return InsertResult.CREATED

    async def get(self, short_code: str) -> Optional[str]:
        return self._mappings.get(short_code)

    async def count(self) -> int:
        return len(self._mappings)

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass
