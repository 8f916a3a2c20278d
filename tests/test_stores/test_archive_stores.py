# tests/test_stores/test_archive_stores.py

import fnmatch
from unittest.mock import AsyncMock

import pytest

from repo_archive.configuration import CacheSettings
from repo_archive.core.cache_manager import ArchiveCacheManager
from repo_archive.stores import InMemoryArchiveStore, SQLiteArchiveStore, create_store
from repo_archive.stores.redis_store import RedisArchiveStore

pytestmark = pytest.mark.asyncio


class FakeAsyncRedis:
    """Just enough of redis.asyncio.Redis for RedisArchiveStore."""

    def __init__(self):
        self.data = {}
        self.ping = AsyncMock(return_value=True)
        self.aclose = AsyncMock()

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = value

    async def delete(self, *keys):
        for key in keys:
            self.data.pop(key, None)

    async def scan_iter(self, match=None):
        for key in list(self.data):
            if match is None or fnmatch.fnmatch(key, match):
                yield key


@pytest.fixture(params=["memory", "sqlite", "redis"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryArchiveStore()
    if request.param == "sqlite":
        return SQLiteArchiveStore(db_path=str(tmp_path / "archives.db"))
    return RedisArchiveStore(redis_url="redis://localhost:6379/0", client=FakeAsyncRedis())


async def test_key_value_contract(store):
    await store.initialize()

    assert await store.get("missing") is None
    assert await store.keys() == []

    await store.set("octo/hello@main", '{"a": 1}')
    await store.set("octo/world@dev", '{"b": 2}')
    assert await store.get("octo/hello@main") == '{"a": 1}'
    assert sorted(await store.keys()) == ["octo/hello@main", "octo/world@dev"]

    # Overwrite is last-write-wins
    await store.set("octo/hello@main", '{"a": 3}')
    assert await store.get("octo/hello@main") == '{"a": 3}'

    await store.delete("octo/hello@main")
    await store.delete("octo/hello@main")
    assert await store.keys() == ["octo/world@dev"]

    await store.clear()
    assert await store.keys() == []

    await store.close()


async def test_cache_on_each_backend(store, sample_files):
    async with ArchiveCacheManager(store=store) as cache:
        await cache.store_archive("testowner", "testrepo", "main", sample_files)
        cached = await cache.get_cached_archive("testowner", "testrepo", "main")

        assert [f.path for f in cached] == ["src/index.ts", "package.json"]
        assert [f.content for f in cached] == [f.content for f in sample_files]


async def test_sqlite_persists_across_instances(tmp_path, sample_files):
    db_path = str(tmp_path / "persist.db")

    async with ArchiveCacheManager(store=SQLiteArchiveStore(db_path=db_path)) as cache:
        await cache.store_archive("o", "r", "main", sample_files)

    async with ArchiveCacheManager(store=SQLiteArchiveStore(db_path=db_path)) as cache:
        cached = await cache.get_cached_archive("o", "r", "main")
        assert len(cached) == 2


async def test_redis_keys_are_namespaced():
    client = FakeAsyncRedis()
    client.data["other-app:key"] = "untouched"
    store = RedisArchiveStore(redis_url="redis://localhost", namespace="ns", client=client)

    await store.initialize()
    await store.set("o/r@main", "{}")
    assert "ns:archives:o/r@main" in client.data
    assert await store.keys() == ["o/r@main"]

    await store.clear()
    assert client.data == {"other-app:key": "untouched"}

    await store.close()
    client.ping.assert_awaited_once()
    client.aclose.assert_awaited_once()


async def test_create_store(tmp_path):
    assert isinstance(create_store(CacheSettings()), InMemoryArchiveStore)

    sqlite_store = create_store(CacheSettings(backend="sqlite", sqlite_path=str(tmp_path / "a.db")))
    assert isinstance(sqlite_store, SQLiteArchiveStore)
    assert sqlite_store.db_path.endswith("a.db")


async def test_sqlite_rejects_bad_table_name(tmp_path):
    with pytest.raises(ValueError):
        SQLiteArchiveStore(db_path=str(tmp_path / "x.db"), table="archives; DROP TABLE x")
