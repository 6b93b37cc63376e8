"""RedisCache error modes, exercised against a stand-in client."""
import pytest

from family_auth.cache.cache_service import RedisCache
from family_auth.utils.errors import SessionStoreUnavailableError


class FakeRedisClient:
    def __init__(self, fail=False):
        self.fail = fail
        self.store = {}
        self.expiry = {}

    async def get(self, key):
        if self.fail:
            raise ConnectionError("redis down")
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self.fail:
            raise ConnectionError("redis down")
        self.store[key] = value
        self.expiry[key] = ex

    async def delete(self, key):
        if self.fail:
            raise ConnectionError("redis down")
        self.store.pop(key, None)


def _cache(fail=False, raise_errors=False):
    cache = RedisCache(redis_url="redis://unused", raise_errors=raise_errors)
    cache.redis = FakeRedisClient(fail=fail)
    return cache


async def test_values_round_trip_as_json():
    cache = _cache()
    await cache.set("user_sessions:u1", ["session:u1:abc"], 60)

    assert cache.redis.store["user_sessions:u1"] == '["session:u1:abc"]'
    assert cache.redis.expiry["user_sessions:u1"] == 60
    assert await cache.get("user_sessions:u1") == ["session:u1:abc"]
    assert await cache.get("missing") is None

    await cache.delete("user_sessions:u1")
    assert await cache.get("user_sessions:u1") is None


async def test_default_mode_swallows_errors():
    cache = _cache(fail=True)

    assert await cache.get("k") is None
    await cache.set("k", {"a": 1})
    await cache.delete("k")
    assert await cache.is_healthy() is False


async def test_strict_mode_raises_service_unavailable():
    cache = _cache(fail=True, raise_errors=True)

    with pytest.raises(SessionStoreUnavailableError):
        await cache.get("k")
    with pytest.raises(SessionStoreUnavailableError):
        await cache.set("k", {"a": 1})
    with pytest.raises(SessionStoreUnavailableError):
        await cache.delete("k")


async def test_health_probe():
    assert await _cache().is_healthy() is True
