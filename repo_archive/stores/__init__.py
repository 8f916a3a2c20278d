# repo_archive/stores/__init__.py

from .base import BaseArchiveStore
from .memory import InMemoryArchiveStore
from .sqlite_store import SQLiteArchiveStore


def create_store(settings) -> BaseArchiveStore:
    """Build the backend named by `settings.backend`"""
    if settings.backend == "memory":
        return InMemoryArchiveStore()
    if settings.backend == "sqlite":
        return SQLiteArchiveStore(db_path=settings.sqlite_path)
    if settings.backend == "redis":
        from .redis_store import RedisArchiveStore
        return RedisArchiveStore(redis_url=settings.redis_url, namespace=settings.namespace)
    raise ValueError(f"Unknown backend: {settings.backend}")


__all__ = ["BaseArchiveStore", "InMemoryArchiveStore", "SQLiteArchiveStore", "create_store"]
