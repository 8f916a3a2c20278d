# repo_archive/__init__.py

from ._version import __version__
from .configuration import CacheSettings, load_settings
from .core import (
    ArchiveCacheManager,
    CompressionManager,
    CompressionMetadata,
    CompressionResult,
    FileInfo,
    RepositoryArchiveMetadata,
    from_storable,
    to_storable,
)
from .exceptions import (
    ArchiveCacheError,
    CorruptPayload,
    DecompressionStageFailure,
    ErrorKind,
    StorageIntegrityFailure,
)
from .stores import create_store


def open_cache(settings=None) -> ArchiveCacheManager:
    """
    Build an ArchiveCacheManager on the backend named in `settings`.

    The manager still needs `await manager.initialize()` (or `async with`).

    Examples:
        settings = CacheSettings(backend="sqlite", sqlite_path="archives.db")
        async with open_cache(settings) as cache:
            await cache.store_archive("octo", "hello", "main", files)
            files = await cache.get_cached_archive("octo", "hello", "main")
    """
    settings = settings or CacheSettings()
    return ArchiveCacheManager(store=create_store(settings), settings=settings)


__all__ = [
    "open_cache",
    "ArchiveCacheManager",
    "CacheSettings",
    "load_settings",
    "CompressionManager",
    "CompressionMetadata",
    "CompressionResult",
    "FileInfo",
    "RepositoryArchiveMetadata",
    "to_storable",
    "from_storable",
    "create_store",
    "ArchiveCacheError",
    "CorruptPayload",
    "DecompressionStageFailure",
    "ErrorKind",
    "StorageIntegrityFailure",
    "__version__",
]
