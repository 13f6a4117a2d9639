"""Database layer for URL shortener."""

from .base import MappingStoreBase
from .factory import create_store
from .memory import InMemoryMappingStore
from .models import InsertResult, URLMapping
from .postgres import PostgresMappingStore
from .sqlite import SQLiteMappingStore

__all__ = [
    "MappingStoreBase",
    "create_store",
    "InMemoryMappingStore",
    "InsertResult",
    "URLMapping",
    "PostgresMappingStore",
    "SQLiteMappingStore",
]
