#!/usr/bin/env python3
"""
Warm the Redis cache for character lookups.

Runs the same cache-aside lookups the service performs, so entries that
are already cached are left alone and missing ones are fetched from the
upstream API and stored.
"""

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional
import sys
import os

import redis.asyncio as redis

from service_characters.app.adapters.character_api_client import CharacterApiClient
from service_characters.app.caching.cache_aside import (
    CacheAsideStore,
    SOURCE_CACHE,
    character_key,
    characters_key,
)


async def warm(
    *,
    redis_url: str,
    upstream_url: str,
    ids: List[str],
    include_collection: bool = True,
    redis_client: Optional[redis.Redis] = None,
    upstream: Optional[CharacterApiClient] = None,
) -> Dict[str, Any]:
    """Execute cache warming and return the summary."""
    upstream = upstream or CharacterApiClient(upstream_url)
    redis_client = redis_client or redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
    store = CacheAsideStore(redis_client, upstream)

    keys = ([characters_key()] if include_collection else []) + [character_key(i) for i in ids]
    summary: Dict[str, Any] = {"planned": len(keys), "hits": [], "misses": [], "errors": {}}

    try:
        # Sequential on purpose: one upstream call at a time
        for key in keys:
            try:
                _, source = await store.lookup(key)
            except Exception as exc:
                summary["errors"][key] = str(exc)
                continue
            summary["hits" if source == SOURCE_CACHE else "misses"].append(key)
    finally:
        await upstream.close()
        await store.close()

    return summary


def _parse_ids(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Warm Redis cache entries for character lookups.")
    parser.add_argument("--redis-url", default=os.getenv("CHARACTERS_REDIS_URL", "redis://localhost:6379/0"), help="Redis connection URL")
    parser.add_argument("--upstream-url", default=os.getenv("CHARACTERS_UPSTREAM_BASE_URL", "https://rickandmortyapi.com/api"), help="Character API base URL")
    parser.add_argument("--ids", type=_parse_ids, default=[], help="Comma-separated character identifiers to warm")
    parser.add_argument("--skip-collection", action="store_true", help="Do not warm the collection key")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write JSON summary")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        summary = asyncio.run(
            warm(
                redis_url=args.redis_url,
                upstream_url=args.upstream_url,
                ids=args.ids,
                include_collection=not args.skip_collection,
            )
        )
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - CLI surface
        print(f"[cache-warm] failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))

    if args.output:
        args.output.write_text(json.dumps(summary, indent=2))

    return 1 if summary["errors"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
