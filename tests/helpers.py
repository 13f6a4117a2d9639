"""Test doubles shared across test modules."""

from shortlink.database.memory import InMemoryMappingStore
from shortlink.shortcode import ShortCodeGenerator


class FixedCodeGenerator(ShortCodeGenerator):
    """Generator that replays a fixed sequence of codes, repeating the last one."""

    def __init__(self, codes):
        super().__init__(default_length=len(codes[0]))
        self.codes = list(codes)
        self.calls = 0

    def generate(self, length=None):
        code = self.codes[min(self.calls, len(self.codes) - 1)]
        self.calls += 1
        return code


class CountingStore(InMemoryMappingStore):
    """In-memory store that counts insert attempts."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.insert_calls = 0

    async def insert(self, short_code, original_url):
        self.insert_calls += 1
        return await super().insert(short_code, original_url)
