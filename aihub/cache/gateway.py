"""
Cache Gateway - Namespaced, expiring storage for generation text.

Wraps an async Redis client so the rest of the pipeline only deals in
caller-supplied keys and plain text values:
- lookup(): read "<namespace>:<key>", None on miss
- store(): write with expiry, overwriting any previous value
- invalidate(): delete an entry

Keys are opaque. No hashing, truncation or collision handling is done,
so two prompts sharing a key share a cache entry. Store errors surface
as CacheUnavailable; callers decide whether to degrade.
"""

import logging

import redis
from redis.asyncio import Redis

from aihub.config import get_settings
from aihub.errors import CacheUnavailable

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60 * 24  # 24 hours


class CacheGateway:
    """
    Read-through / write-through wrapper around a key/value store.

    Usage:
        gateway = CacheGateway(Redis.from_url("redis://localhost:6379/0"))
        await gateway.store("greeting", "Hello!")
        text = await gateway.lookup("greeting")

    Attributes:
        namespace: Prefix joined to every key with ":"
        default_ttl_seconds: Expiry used when store() gets no explicit TTL
    """

    def __init__(
        self,
        client: Redis,
        namespace: str = "ai-hub:cache",
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        self._client = client
        self.namespace = namespace
        self.default_ttl_seconds = default_ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def lookup(self, key: str) -> str | None:
        """
        Read cached text.

        Args:
            key: Caller-supplied cache key

        Returns:
            Cached text, or None on miss

        Raises:
            CacheUnavailable: If the store cannot be read or the value is not UTF-8
        """
        full_key = self._key(key)
        try:
            value = await self._client.get(full_key)
            if isinstance(value, bytes):
                value = value.decode("utf-8")
        except (redis.RedisError, OSError, UnicodeDecodeError) as e:
            raise CacheUnavailable(f"Cache read failed for '{full_key}': {e}") from e

        if value is None:
            logger.debug(f"Cache miss: {full_key}")
            return None

        logger.debug(f"Cache hit: {full_key}")
        return value

    async def store(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """
        Write text with an expiry.

        Args:
            key: Caller-supplied cache key
            value: Text to cache
            ttl_seconds: Expiry in seconds (default: gateway TTL, 24 hours)

        Raises:
            CacheUnavailable: If the store cannot be written
        """
        full_key = self._key(key)
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds
        try:
            await self._client.set(full_key, value, ex=ttl)
        except (redis.RedisError, OSError) as e:
            raise CacheUnavailable(f"Cache write failed for '{full_key}': {e}") from e
        logger.debug(f"Cached {len(value)} chars under {full_key} (ttl={ttl}s)")

    async def invalidate(self, key: str) -> bool:
        """
        Delete a cached entry.

        Args:
            key: Caller-supplied cache key

        Returns:
            True if an entry was removed

        Raises:
            CacheUnavailable: If the store cannot be reached
        """
        full_key = self._key(key)
        try:
            removed = await self._client.delete(full_key)
        except (redis.RedisError, OSError) as e:
            raise CacheUnavailable(f"Cache delete failed for '{full_key}': {e}") from e
        return bool(removed)

    async def ping(self) -> bool:
        """Check store connectivity."""
        try:
            return bool(await self._client.ping())
        except (redis.RedisError, OSError) as e:
            raise CacheUnavailable(f"Cache ping failed: {e}") from e


_gateway: CacheGateway | None = None


def get_cache_gateway() -> CacheGateway:
    """
    Get the global cache gateway instance.

    The Redis client is created lazily from settings; no connection is
    opened until the first command.

    Returns:
        The singleton CacheGateway instance.
    """
    global _gateway
    if _gateway is None:
        settings = get_settings()
        client = Redis.from_url(settings.redis_url, decode_responses=True)
        _gateway = CacheGateway(
            client,
            namespace=settings.cache_namespace,
            default_ttl_seconds=settings.cache_ttl_seconds,
        )
        logger.debug(f"Initialized cache gateway (namespace={settings.cache_namespace})")
    return _gateway
