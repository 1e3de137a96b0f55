"""
Cache module: Namespaced response cache over Redis.

Key exports:
- CacheGateway: lookup / store / invalidate with namespacing and expiry
- get_cache_gateway(): Get the global gateway instance
- DEFAULT_TTL_SECONDS: Default expiry (24 hours)
"""

from aihub.cache.gateway import DEFAULT_TTL_SECONDS, CacheGateway, get_cache_gateway

__all__ = [
    "CacheGateway",
    "get_cache_gateway",
    "DEFAULT_TTL_SECONDS",
]
