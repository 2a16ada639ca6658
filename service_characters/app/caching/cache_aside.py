"""
Cache-aside store for character resources.
"""

import json
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..adapters.character_api_client import CharacterApiClient
    from shared.metrics import MetricsCollector


CHARACTERS_KEY = "characters"
CHARACTER_KEY_PREFIX = "character:"

SOURCE_CACHE = "cache"
SOURCE_UPSTREAM = "upstream"


def characters_key() -> str:
    """Cache key for the character collection."""
    return CHARACTERS_KEY


def character_key(character_id: str) -> str:
    """Cache key for a single character."""
    return f"{CHARACTER_KEY_PREFIX}{character_id}"


class CacheAsideStore:
    """Reads through Redis in front of the character API.

    Entries are written without expiry and never invalidated here. A failed
    read fails the lookup; a failed write is logged and the fetched value is
    still returned.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        upstream: "CharacterApiClient",
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.redis = redis_client
        self.upstream = upstream
        self.metrics = metrics
        self.logger = get_logger("characters.cache")

    async def get_characters(self) -> List[Dict[str, Any]]:
        return await self.get(characters_key())

    async def get_character(self, character_id: str) -> Dict[str, Any]:
        return await self.get(character_key(character_id))

    async def get(self, key: str) -> Any:
        """Return the resource stored under ``key``, populating it on a miss."""
        resource, _ = await self.lookup(key)
        return resource

    async def lookup(self, key: str) -> Tuple[Any, str]:
        """
        Resolve ``key`` through the cache.

        Returns the resource together with the source that satisfied the
        request: "cache" or "upstream".
        """
        fetch = self._loader_for(key)
        cache_type = self._cache_type(key)

        cached = await self.redis.get(key)
        if cached is not None:
            try:
                resource = json.loads(cached)
            except json.JSONDecodeError as exc:
                # Unreadable entry: refetch and overwrite it
                self.logger.warning("Discarding undecodable cache entry", key=key, error=str(exc))
            else:
                self._record(cache_type, hit=True)
                self.logger.debug("Serving from cache", key=key)
                return resource, SOURCE_CACHE

        self._record(cache_type, hit=False)
        resource = await fetch()
        await self._write(key, resource)
        return resource, SOURCE_UPSTREAM

    async def health_check(self) -> bool:
        """Ping the cache backend."""
        try:
            return bool(await self.redis.ping())
        except RedisError as exc:
            self.logger.warning("Cache health check failed", error=str(exc))
            return False

    async def close(self) -> None:
        """Close the Redis connection pool."""
        await self.redis.aclose()

    def _loader_for(self, key: str) -> Callable[[], Awaitable[Any]]:
        """Map a cache key to the upstream call that produces its value."""
        if key == CHARACTERS_KEY:
            return self.upstream.get_characters

        if key.startswith(CHARACTER_KEY_PREFIX):
            character_id = key[len(CHARACTER_KEY_PREFIX):]
            if character_id:
                return lambda: self.upstream.get_character(character_id)

        raise ValueError(f"Unknown cache key: {key!r}")

    @staticmethod
    def _cache_type(key: str) -> str:
        return CHARACTERS_KEY if key == CHARACTERS_KEY else "character"

    async def _write(self, key: str, resource: Any) -> None:
        """Store ``resource`` under ``key``; failures are logged only."""
        try:
            await self.redis.set(key, json.dumps(resource))
            self.logger.debug("Cached value", key=key)
        except RedisError as exc:
            self.logger.error("Cache set error", key=key, error=str(exc))

    def _record(self, cache_type: str, *, hit: bool) -> None:
        if not self.metrics:
            return
        metric = "cache_hits_total" if hit else "cache_misses_total"
        self.metrics.increment_counter(metric, cache_type=cache_type)
