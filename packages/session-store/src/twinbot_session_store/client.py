"""Redis client adapter for the redis credential store.

Normalizes the interface between the Upstash SDK (cloud) and fakeredis (local
dev). The store only needs plain string get/set/delete, which both support
with the same call shapes once responses are decoded.

Environment detection:
  - UPSTASH_REDIS_REST_URL set → Upstash SDK (shared across machines)
  - Otherwise → fakeredis (in-process, lost when the process exits)

Usage:
    from twinbot_session_store.client import get_client

    client = get_client()
    await client.set("session", session_json)
    value = await client.get("session")
"""

from __future__ import annotations

import os
from typing import Any


class RedisAdapter:
    """Unified async Redis interface over Upstash SDK or fakeredis."""

    def __init__(self, raw_client: Any, is_upstash: bool = False) -> None:
        self._client = raw_client
        self._is_upstash = is_upstash

    @property
    def is_upstash(self) -> bool:
        return self._is_upstash

    async def get(self, key: str) -> str | None:
        value = await self._client.get(key)
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def set(self, key: str, value: str) -> None:
        await self._client.set(key, value)

    async def delete(self, *keys: str) -> None:
        if keys:
            await self._client.delete(*keys)


# ============================================================================
# Singleton management
# ============================================================================

_client: RedisAdapter | None = None


def get_client() -> RedisAdapter:
    """Return a lazily-initialized RedisAdapter singleton.

    Environment detection:
      - UPSTASH_REDIS_REST_URL set → Upstash SDK
      - Otherwise → fakeredis (in-memory, no external dependency)
    """
    global _client
    if _client is not None:
        return _client

    if os.environ.get("UPSTASH_REDIS_REST_URL"):
        from upstash_redis.asyncio import Redis

        raw = Redis.from_env()
        _client = RedisAdapter(raw, is_upstash=True)
    else:
        from fakeredis.aioredis import FakeRedis

        raw = FakeRedis(decode_responses=True)
        _client = RedisAdapter(raw, is_upstash=False)

    return _client


def reset_client() -> None:
    """Reset the client singleton. Used in tests to inject mocks."""
    global _client
    _client = None


def set_client(adapter: RedisAdapter) -> None:
    """Inject a client. Used in tests."""
    global _client
    _client = adapter
