"""Short code generation utilities."""

import secrets
import string
from typing import Optional


class ShortCodeGenerator:
    """Generate random short codes for URLs.

    The generator is stateless: it never checks whether a code is already
    taken. Uniqueness is enforced by the store's insert.
    """

    # Base62 characters (alphanumeric, case-sensitive)
    BASE62_CHARS = string.ascii_letters + string.digits  # a-zA-Z0-9

    # Literal paths served next to /{short_code}; a code equal to one is unreachable
    RESERVED_CODES = frozenset({"health"})

    def __init__(self, default_length: int = 6):
        """Initialize short code generator.

        Args:
            default_length: Default length for generated codes
        """
        if default_length < 1:
            raise ValueError("default_length must be at least 1")
        self.default_length = default_length

    def generate(self, length: Optional[int] = None) -> str:
        """Generate a random short code.

        Characters are drawn from the OS entropy source, so codes cannot be
        predicted from request timing.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Random short code
        """
        length = length or self.default_length
        return ''.join(secrets.choice(self.BASE62_CHARS) for _ in range(length))

    @staticmethod
    def is_valid_format(code: str) -> bool:
        """Check if code only uses base62 characters.

        Args:
            code: Code to validate

        Returns:
            True if valid format
        """
        return bool(code) and all(c in ShortCodeGenerator.BASE62_CHARS for c in code)

    @classmethod
    def is_reserved(cls, code: str) -> bool:
        """Check if code collides with a fixed route."""
        return code in cls.RESERVED_CODES
