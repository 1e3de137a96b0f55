"""
Cache Gateway Tests

Validates namespacing, expiry, overwrite and error translation of the
Redis-backed cache gateway, using an in-memory Redis double.
"""

import pytest

from aihub.cache.gateway import DEFAULT_TTL_SECONDS, CacheGateway, get_cache_gateway
from aihub.errors import CacheUnavailable
from tests.fixtures import InMemoryRedis, connection_error


class TestLookupAndStore:
    """Tests for lookup() and store()."""

    @pytest.mark.asyncio
    async def test_miss_returns_none(self, cache_gateway):
        assert await cache_gateway.lookup("absent") is None

    @pytest.mark.asyncio
    async def test_store_then_lookup(self, cache_gateway):
        await cache_gateway.store("greeting", "Hello!")
        assert await cache_gateway.lookup("greeting") == "Hello!"

    @pytest.mark.asyncio
    async def test_keys_are_namespaced(self, cache_gateway, fake_redis):
        await cache_gateway.store("k", "v")
        assert "test-cache:k" in fake_redis.data
        assert fake_redis.commands("set")[0][1] == "test-cache:k"

    @pytest.mark.asyncio
    async def test_default_namespace(self, fake_redis):
        gateway = CacheGateway(fake_redis)
        await gateway.store("summary:42", "text")
        assert "ai-hub:cache:summary:42" in fake_redis.data

    @pytest.mark.asyncio
    async def test_default_ttl_is_one_day(self, cache_gateway, fake_redis):
        await cache_gateway.store("k", "v")
        _, _, _, ex = fake_redis.commands("set")[0]
        assert ex == DEFAULT_TTL_SECONDS == 86400

    @pytest.mark.asyncio
    async def test_ttl_override(self, cache_gateway, fake_redis):
        await cache_gateway.store("k", "v", ttl_seconds=30)
        assert fake_redis.commands("set")[0][3] == 30

    @pytest.mark.asyncio
    async def test_expired_entry_is_a_miss(self, cache_gateway, fake_redis):
        await cache_gateway.store("k", "v")
        value, _ = fake_redis.data["test-cache:k"]
        fake_redis.data["test-cache:k"] = (value, 0.0)
        assert await cache_gateway.lookup("k") is None

    @pytest.mark.asyncio
    async def test_store_overwrites(self, cache_gateway):
        await cache_gateway.store("k", "first")
        await cache_gateway.store("k", "second")
        assert await cache_gateway.lookup("k") == "second"

    @pytest.mark.asyncio
    async def test_bytes_values_are_decoded(self, cache_gateway, fake_redis):
        fake_redis.data["test-cache:k"] = ("héllo".encode("utf-8"), None)
        assert await cache_gateway.lookup("k") == "héllo"

    @pytest.mark.asyncio
    async def test_keys_are_not_transformed(self, cache_gateway, fake_redis):
        key = "Summarize: a very long prompt " * 20
        await cache_gateway.store(key, "v")
        assert f"test-cache:{key}" in fake_redis.data


class TestInvalidate:
    """Tests for invalidate()."""

    @pytest.mark.asyncio
    async def test_invalidate_existing(self, cache_gateway):
        await cache_gateway.store("k", "v")
        assert await cache_gateway.invalidate("k") is True
        assert await cache_gateway.lookup("k") is None

    @pytest.mark.asyncio
    async def test_invalidate_missing(self, cache_gateway):
        assert await cache_gateway.invalidate("k") is False


class TestErrors:
    """Store errors surface as CacheUnavailable."""

    @pytest.mark.asyncio
    async def test_lookup_error(self, cache_gateway, fake_redis):
        fake_redis.fail_with = connection_error()
        with pytest.raises(CacheUnavailable, match="read failed"):
            await cache_gateway.lookup("k")

    @pytest.mark.asyncio
    async def test_store_error(self, cache_gateway, fake_redis):
        fake_redis.fail_with = connection_error()
        with pytest.raises(CacheUnavailable, match="write failed"):
            await cache_gateway.store("k", "v")

    @pytest.mark.asyncio
    async def test_invalidate_error(self, cache_gateway, fake_redis):
        fake_redis.fail_with = connection_error()
        with pytest.raises(CacheUnavailable):
            await cache_gateway.invalidate("k")

    @pytest.mark.asyncio
    async def test_undecodable_bytes_value(self, cache_gateway, fake_redis):
        fake_redis.data["test-cache:k"] = (b"\xff\xfe", None)
        with pytest.raises(CacheUnavailable, match="read failed"):
            await cache_gateway.lookup("k")

    @pytest.mark.asyncio
    async def test_client_decode_error(self, cache_gateway, fake_redis):
        fake_redis.fail_with = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        with pytest.raises(CacheUnavailable):
            await cache_gateway.lookup("k")

    @pytest.mark.asyncio
    async def test_os_error_is_translated(self, cache_gateway, fake_redis):
        fake_redis.fail_with = ConnectionRefusedError("refused")
        with pytest.raises(CacheUnavailable):
            await cache_gateway.lookup("k")

    @pytest.mark.asyncio
    async def test_ping(self, cache_gateway, fake_redis):
        assert await cache_gateway.ping() is True
        fake_redis.fail_with = connection_error()
        with pytest.raises(CacheUnavailable):
            await cache_gateway.ping()


class TestGlobalGateway:
    """Tests for the settings-driven singleton."""

    def test_singleton_uses_settings(self):
        gateway = get_cache_gateway()
        assert gateway is get_cache_gateway()
        assert gateway.namespace == "ai-hub:cache"
        assert gateway.default_ttl_seconds == DEFAULT_TTL_SECONDS

    def test_fixture_double_is_fresh(self):
        assert InMemoryRedis().data == {}
