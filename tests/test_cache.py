import fnmatch

from farmstand.data import cache as cache_module
from farmstand.data.cache import RedisCache


class FakeRedis:
    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def scan_iter(self, match=None):
        for key in list(self.data):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            removed += self.data.pop(key, None) is not None
        return removed

    async def ping(self):
        return True


async def test_set_get_and_delete_pattern() -> None:
    redis = FakeRedis()
    cache = RedisCache(redis)

    await cache.set_with_ttl("products:static:home", b"[]", 3600)
    await cache.set_with_ttl("products:static:other", b"[1]", 60)
    await cache.set_with_ttl("sessions:1", b"x", 60)

    assert await cache.get("products:static:home") == b"[]"
    assert redis.ttls["products:static:home"] == 3600
    assert await cache.delete_pattern("products:static:*") == 2
    assert await cache.delete_pattern("products:static:*") == 0
    assert list(redis.data) == ["sessions:1"]
    assert await cache.ping() is True


def test_get_cache_without_url(monkeypatch) -> None:
    monkeypatch.setattr(cache_module.settings, "redis_url", None)
    cache_module.get_cache.cache_clear()
    try:
        assert cache_module.get_cache() is None
    finally:
        cache_module.get_cache.cache_clear()
