import threading
from datetime import timedelta

from tsddlib.cache import MemoryCache, RedisCache


class _FakeRedis:
    def __init__(self):
        self.store = {}
        self.expiries = {}

    def set(self, key, value, px=None):
        self.store[key] = value.encode("utf-8") if isinstance(value, str) else value
        if px is not None:
            self.expiries[key] = px

    def get(self, key):
        return self.store.get(key)

    def delete(self, key):
        self.store.pop(key, None)


def test_memory_set_get():
    cache = MemoryCache()
    cache.set("k", "v")
    assert cache.get("k") == "v"


def test_memory_missing_is_empty():
    assert MemoryCache().get("nothing") == ""


def test_memory_delete():
    cache = MemoryCache()
    cache.set("k", "v")
    cache.delete("k")
    cache.delete("k")
    assert cache.get("k") == ""


def test_memory_set_and_expire_stores():
    cache = MemoryCache()
    cache.set_and_expire("k", "v", timedelta(seconds=1))
    assert cache.get("k") == "v"


def test_memory_concurrent_writes():
    cache = MemoryCache()

    def worker(start):
        for i in range(start, start + 100):
            cache.set(f"k{i}", str(i))

    threads = [threading.Thread(target=worker, args=(n * 100,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert all(cache.get(f"k{i}") == str(i) for i in range(400))


def test_redis_set_get_delete():
    fake = _FakeRedis()
    cache = RedisCache("localhost:6379", client=fake)
    cache.set("k", "值")
    assert cache.get("k") == "值"
    cache.delete("k")
    assert cache.get("k") == ""


def test_redis_expire_in_milliseconds():
    fake = _FakeRedis()
    cache = RedisCache("localhost:6379", client=fake)
    cache.set_and_expire("a", "1", timedelta(seconds=2))
    cache.set_and_expire("b", "1", 1.5)
    assert fake.expiries["a"] == 2000
    assert fake.expiries["b"] == 1500


def test_redis_conn_is_client():
    fake = _FakeRedis()
    assert RedisCache("localhost:6379", client=fake).conn is fake


def test_redis_address_parsed():
    cache = RedisCache("localhost:6380", "")
    kwargs = cache.conn.connection_pool.connection_kwargs
    assert kwargs["host"] == "localhost"
    assert kwargs["port"] == 6380