"""
Character proxy service.
"""

from typing import Any, Dict, Optional

import httpx
import redis.asyncio as redis
from fastapi.responses import JSONResponse, PlainTextResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config

from .adapters.character_api_client import CharacterApiClient
from .caching.cache_aside import CacheAsideStore, SOURCE_CACHE, character_key, characters_key


class CharacterService(BaseService):
    """Character proxy service implementation.

    The configured variant decides what is served: ``greeting`` only answers
    ``/``, ``proxy`` adds the character routes straight from upstream, and
    ``cached`` puts a Redis cache-aside store in front of the upstream.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        redis_client: Optional[redis.Redis] = None,
    ):
        super().__init__(config)

        self.upstream: Optional[CharacterApiClient] = None
        self.cache_store: Optional[CacheAsideStore] = None

        if self.config.proxy_enabled:
            self.upstream = CharacterApiClient(
                self.config.upstream_base_url,
                http_client=http_client,
                metrics=self.metrics,
            )

        if self.config.cache_enabled:
            if redis_client is None:
                redis_client = redis.from_url(
                    self.config.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                )
            self.cache_store = CacheAsideStore(redis_client, self.upstream, metrics=self.metrics)

        self._setup_character_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.character_service = self

    def _setup_character_routes(self):
        """Set up the greeting and character routes."""

        @self.app.get("/", response_class=PlainTextResponse)
        async def root():
            """Static greeting."""
            return self.config.greeting

        if not self.config.proxy_enabled:
            return

        @self.app.get("/characters")
        async def list_characters():
            """Return the character collection."""
            return await self._serve(characters_key())

        @self.app.get("/characters/{character_id}")
        async def get_character(character_id: str):
            """Return a single character."""
            return await self._serve(character_key(character_id), character_id)

    async def _serve(self, key: str, character_id: Optional[str] = None) -> JSONResponse:
        """Resolve a resource through the cache when enabled, else upstream."""
        headers: Dict[str, str] = {}

        if self.cache_store is not None:
            resource, source = await self.cache_store.lookup(key)
            headers["X-Cache"] = "HIT" if source == SOURCE_CACHE else "MISS"
        elif character_id is None:
            resource = await self.upstream.get_characters()
        else:
            resource = await self.upstream.get_character(character_id)

        return JSONResponse(content=resource, headers=headers)

    async def _check_dependencies(self) -> Dict[str, Any]:
        """Check character service dependencies."""
        dependencies: Dict[str, Any] = {}

        if self.cache_store is not None:
            dependencies["redis"] = "ok" if await self.cache_store.health_check() else "error"

        return dependencies

    async def start(self):
        """Announce readiness."""
        self.logger.info(
            f"Server is running on port {self.port}",
            variant=self.config.variant,
            upstream=self.config.upstream_base_url if self.upstream else None,
        )

    async def stop(self):
        """Release the shared HTTP and Redis clients."""
        if self.upstream is not None:
            await self.upstream.close()
        if self.cache_store is not None:
            await self.cache_store.close()

        self.logger.info("Character service stopped")


def create_app(config: Optional[ServiceConfig] = None, **kwargs):
    """Create character service application."""
    service = CharacterService(config, **kwargs)
    return service.app


def main():
    """Run the character service with configuration from the environment."""
    service = CharacterService(get_config())
    service.run()


if __name__ == "__main__":
    main()
