"""Data models for URL shortener."""

from dataclasses import dataclass
from enum import Enum


class InsertResult(Enum):
    """Outcome of a single insert attempt."""

    CREATED = "created"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class URLMapping:
    """Represents a URL mapping in the database."""

    short_code: str
    original_url: str
