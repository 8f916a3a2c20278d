# cache_manager.py - Repository archive cache
# ============================================================================
# FILE: repo_archive/core/cache_manager.py
# Compressed repository snapshots keyed by owner/repo@branch, with max age,
# a hard entry cap, and read-back verification after every write
# ============================================================================

import json
import time
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..configuration import CacheSettings
from ..exceptions import StorageIntegrityFailure
from ..monitoring import metrics as m
from ..monitoring.metrics import PrometheusMetrics
from ..stores.base import BaseArchiveStore
from .compression import CompressionManager
from .models import (
    CacheStats,
    FileInfo,
    RepositoryArchiveData,
    RepositoryArchiveMetadata,
)
from .storage_codec import from_storable, to_storable

logger = logging.getLogger(__name__)

MS_PER_HOUR = 60 * 60 * 1000

FileLike = Union[FileInfo, Dict[str, Any]]


class ArchiveCacheManager:
    """
    Owns the lifecycle of persisted archive records.

    Entry states: absent -> valid -> (expired | evicted | corrupt) -> absent.
    Reads never raise for a bad entry: expired and corrupt records are
    deleted and reported as a miss (None). Writes raise
    StorageIntegrityFailure when the read-back does not match.
    """

    def __init__(
        self,
        store: BaseArchiveStore,
        settings: Optional[CacheSettings] = None,
        compressor: Optional[CompressionManager] = None,
        metrics: Optional[PrometheusMetrics] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.settings = settings or CacheSettings()
        self.compressor = compressor or CompressionManager(
            extreme_threshold_bytes=self.settings.extreme_threshold_bytes,
            standard_level=self.settings.standard_level,
            lossy_preprocess=self.settings.lossy_preprocess,
            clock=clock,
        )
        self.metrics = metrics or m.get_metrics()
        self.clock = clock
        self._initialized = False

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    async def initialize(self):
        if self._initialized:
            return
        await self.store.initialize()
        self._initialized = True
        logger.info(
            f"Initialized ArchiveCacheManager (max_archives={self.settings.max_archives}, "
            f"max_age_hours={self.settings.max_age_hours})"
        )

    async def close(self):
        if not self._initialized:
            return
        await self.store.close()
        self._initialized = False

    async def __aenter__(self) -> "ArchiveCacheManager":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _ensure_ready(self):
        if not self._initialized:
            raise RuntimeError("ArchiveCacheManager used before initialize()")

    # ========================================================================
    # KEYS / TIME
    # ========================================================================

    @staticmethod
    def make_archive_id(owner: str, repo: str, branch: str = "main") -> str:
        return f"{owner}/{repo}@{branch}"

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _age_hours(self, metadata: RepositoryArchiveMetadata) -> float:
        return (self._now_ms() - metadata.downloaded_at) / MS_PER_HOUR

    # ========================================================================
    # READ
    # ========================================================================

    async def get_cached_archive(
        self, owner: str, repo: str, branch: str = "main"
    ) -> Optional[List[FileInfo]]:
        """
        Return the cached file list, or None on a miss.
        Expired and corrupt entries are removed as a side effect.
        """
        self._ensure_ready()
        archive_id = self.make_archive_id(owner, repo, branch)

        loaded = await self._load_fresh(archive_id)
        if loaded is None:
            return None
        metadata, record = loaded

        encoded = record.get("compressed_files_encoded")
        if not encoded:
            await self._drop_corrupt(archive_id, "stored blob is missing or empty")
            return None

        try:
            blob = from_storable(encoded)
            files_json = self.compressor.decompress_auto(blob, metadata.compression_metadata)
            files = [FileInfo.from_dict(item) for item in json.loads(files_json)]
        except Exception as e:
            await self._drop_corrupt(archive_id, str(e))
            return None

        self.metrics.counter_inc(m.CACHE_HITS)
        logger.info(
            f"Cache hit for {archive_id} ({len(files)} files, "
            f"ratio {metadata.compression_ratio:.2f}:1, {self._age_hours(metadata):.1f}h old)"
        )
        return files

    async def get_archive_data(
        self, owner: str, repo: str, branch: str = "main"
    ) -> Optional[RepositoryArchiveData]:
        """Return the decoded record (compressed blob + raw archive) without decompressing."""
        self._ensure_ready()
        archive_id = self.make_archive_id(owner, repo, branch)

        loaded = await self._load_fresh(archive_id)
        if loaded is None:
            return None
        metadata, record = loaded

        try:
            blob = from_storable(record.get("compressed_files_encoded") or "")
            raw_encoded = record.get("raw_archive_encoded")
            raw_archive = from_storable(raw_encoded) if raw_encoded else None
        except Exception as e:
            await self._drop_corrupt(archive_id, str(e))
            return None

        if not blob:
            await self._drop_corrupt(archive_id, "stored blob is missing or empty")
            return None

        return RepositoryArchiveData(metadata=metadata, compressed_files=blob, raw_archive=raw_archive)

    async def _load_fresh(
        self, archive_id: str
    ) -> Optional[Tuple[RepositoryArchiveMetadata, Dict[str, Any]]]:
        raw = await self.store.get(archive_id)
        if raw is None:
            self.metrics.counter_inc(m.CACHE_MISSES)
            logger.debug(f"No cached archive found for {archive_id}")
            return None

        try:
            record, metadata = self._parse_record(raw)
        except Exception as e:
            await self._drop_corrupt(archive_id, f"unreadable record ({e})")
            return None

        age_hours = self._age_hours(metadata)
        if age_hours > self.settings.max_age_hours:
            await self.store.delete(archive_id)
            self.metrics.counter_inc(m.CACHE_EXPIRED)
            await self._refresh_entry_gauge()
            logger.info(f"Archive {archive_id} expired ({age_hours:.1f}h old), removed from cache")
            return None

        return metadata, record

    async def _drop_corrupt(self, archive_id: str, reason: str):
        await self.store.delete(archive_id)
        self.metrics.counter_inc(m.CACHE_CORRUPT)
        await self._refresh_entry_gauge()
        logger.warning(f"Removed corrupted cache entry {archive_id}: {reason}")

    @staticmethod
    def _parse_record(raw: str) -> Tuple[Dict[str, Any], RepositoryArchiveMetadata]:
        record = json.loads(raw)
        if not isinstance(record, dict):
            raise ValueError("record is not a mapping")
        return record, RepositoryArchiveMetadata.from_dict(record["metadata"])

    # ========================================================================
    # WRITE
    # ========================================================================

    async def store_archive(
        self,
        owner: str,
        repo: str,
        branch: str,
        files: Sequence[FileLike],
        raw_archive: Optional[bytes] = None,
        commit_sha: Optional[str] = None,
    ) -> RepositoryArchiveMetadata:
        """
        Compress and persist a file list, then verify the write by reading it back.

        Raises:
            StorageIntegrityFailure: the backend acknowledged the write but the
                stored blob is missing or has the wrong size. The entry is removed.
        """
        self._ensure_ready()
        archive_id = self.make_archive_id(owner, repo, branch)

        payload = [f.to_dict() if isinstance(f, FileInfo) else FileInfo.from_dict(f).to_dict() for f in files]
        files_json = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
        result = self.compressor.compress_auto(files_json)

        metadata = RepositoryArchiveMetadata(
            id=archive_id,
            owner=owner,
            repo=repo,
            branch=branch,
            downloaded_at=self._now_ms(),
            original_size=result.original_size,
            compressed_size=result.compressed_size,
            compression_ratio=result.compression_ratio,
            file_count=len(payload),
            compression_metadata=result.metadata,
            commit_sha=commit_sha,
        )
        record = {
            "metadata": metadata.to_dict(),
            "compressed_files_encoded": to_storable(result.compressed_data),
            "raw_archive_encoded": to_storable(raw_archive) if raw_archive is not None else None,
        }

        await self.store.set(archive_id, json.dumps(record))
        logger.info(
            f"Stored archive {archive_id} ({len(payload)} files, "
            f"{result.original_size}b -> {result.compressed_size}b, {result.algorithm})"
        )

        if self.settings.verify_writes:
            await self._verify_write(archive_id, result.compressed_size)

        self.metrics.counter_inc(m.CACHE_STORES)
        self.metrics.histogram_observe(m.COMPRESSION_RATIO, value=result.compression_ratio)

        try:
            await self.cleanup_old_archives()
        except Exception as e:
            logger.error(f"Failed to cleanup old archives: {e}")

        return metadata

    async def _verify_write(self, archive_id: str, expected_size: int):
        actual: Optional[int] = None
        try:
            stored = await self.store.get(archive_id)
            encoded = json.loads(stored).get("compressed_files_encoded") if stored else None
            if encoded:
                actual = len(from_storable(encoded))
        except Exception as e:
            logger.error(f"Read-back of {archive_id} failed: {e}")

        if actual != expected_size:
            self.metrics.counter_inc(m.INTEGRITY_FAILURES)
            logger.error(f"Data verification failed for {archive_id}: expected {expected_size}b, got {actual}")
            await self.store.delete(archive_id)
            await self._refresh_entry_gauge()
            raise StorageIntegrityFailure(archive_id, expected_size, actual)

        logger.debug(f"Data verification passed for {archive_id}")

    # ========================================================================
    # EVICTION
    # ========================================================================

    async def cleanup_old_archives(self) -> int:
        """
        Evict the oldest archives until at most `max_archives` remain.
        Unreadable records met during the scan are deleted as well.
        """
        keys = await self.store.keys()
        if len(keys) <= self.settings.max_archives:
            self.metrics.gauge_set(m.CACHE_ENTRIES, value=len(keys))
            return 0

        removed = 0
        archives: List[Tuple[str, RepositoryArchiveMetadata]] = []
        for key in keys:
            raw = await self.store.get(key)
            if raw is None:
                continue
            try:
                _, metadata = self._parse_record(raw)
            except Exception as e:
                logger.warning(f"Failed to read archive metadata for {key}: {e}")
                await self.store.delete(key)
                self.metrics.counter_inc(m.CACHE_CORRUPT)
                removed += 1
                continue
            archives.append((key, metadata))

        archives.sort(key=lambda item: item[1].downloaded_at)
        excess = len(archives) - self.settings.max_archives
        for key, metadata in archives[:max(excess, 0)]:
            await self.store.delete(key)
            self.metrics.counter_inc(m.CACHE_EVICTIONS)
            logger.info(f"Evicted old repository archive: {metadata.id}")
            removed += 1

        self.metrics.gauge_set(m.CACHE_ENTRIES, value=len(archives) - max(excess, 0))
        return removed

    async def cleanup_expired(self) -> int:
        """Delete every archive older than `max_age_hours`."""
        self._ensure_ready()
        removed = 0
        for key in await self.store.keys():
            raw = await self.store.get(key)
            if raw is None:
                continue
            try:
                _, metadata = self._parse_record(raw)
            except Exception:
                # Unreadable entries are left for the eviction scan.
                continue
            if self._age_hours(metadata) > self.settings.max_age_hours:
                await self.store.delete(key)
                self.metrics.counter_inc(m.CACHE_EXPIRED)
                removed += 1
        if removed:
            logger.info(f"Removed {removed} expired archives")
        await self._refresh_entry_gauge()
        return removed

    # ========================================================================
    # MANAGEMENT
    # ========================================================================

    async def remove_archive(self, owner: str, repo: str, branch: str = "main") -> bool:
        self._ensure_ready()
        archive_id = self.make_archive_id(owner, repo, branch)
        existed = await self.store.get(archive_id) is not None
        await self.store.delete(archive_id)
        logger.info(f"Removed repository archive: {archive_id}")
        await self._refresh_entry_gauge()
        return existed

    async def clear_all_archives(self):
        self._ensure_ready()
        await self.store.clear()
        self.metrics.gauge_set(m.CACHE_ENTRIES, value=0)
        logger.info("Cleared all repository archives from cache")

    async def _refresh_entry_gauge(self):
        self.metrics.gauge_set(m.CACHE_ENTRIES, value=len(await self.store.keys()))

    async def get_archive_list(self) -> List[RepositoryArchiveMetadata]:
        """Metadata of every readable archive, newest first."""
        self._ensure_ready()
        archives = []
        for key in await self.store.keys():
            raw = await self.store.get(key)
            if raw is None:
                continue
            try:
                _, metadata = self._parse_record(raw)
            except Exception as e:
                logger.warning(f"Failed to read archive metadata for {key}: {e}")
                continue
            archives.append(metadata)

        archives.sort(key=lambda a: a.downloaded_at, reverse=True)
        return archives

    async def get_cache_stats(self) -> CacheStats:
        return CacheStats.from_archives(await self.get_archive_list())
