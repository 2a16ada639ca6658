"""
Character caching package.

Provides the cache-aside store used to serve repeated character reads
from Redis instead of the upstream API.
"""

from .cache_aside import CacheAsideStore, character_key, characters_key

__all__ = ["CacheAsideStore", "character_key", "characters_key"]
