import time
import asyncio
import logging

from repo_archive import ArchiveCacheManager, CacheSettings, FileInfo
from repo_archive.core.compression import CompressionManager
from repo_archive.stores import InMemoryArchiveStore


def make_repository(file_count: int, functions_per_file: int = 20):
    """Synthetic TypeScript repository snapshot"""
    files = []
    for i in range(file_count):
        body = "\n".join(
            f"export async function handler{i}_{j}(request) {{\n"
            f"    const result = await fetchData(request.params.id);\n"
            f"    console.log('handled', result.length);\n"
            f"    return result;\n"
            f"}}"
            for j in range(functions_per_file)
        )
        files.append(FileInfo(
            path=f"src/handlers/h{i}.ts",
            name=f"h{i}.ts",
            size=len(body),
            content=body,
            language="typescript",
        ))
    return files


async def run_benchmark():
    print("🚀 Starting archive cache benchmark...\n")

    compressor = CompressionManager()
    cache = ArchiveCacheManager(store=InMemoryArchiveStore(), settings=CacheSettings())
    await cache.initialize()

    print(f"{'Files':<8} | {'Algorithm':<20} | {'Original':<10} | {'Stored':<10} | {'Ratio':<8} | {'Store (s)':<10} | {'Read (s)'}")
    print("-" * 95)

    for file_count in (5, 50, 200, 800):
        files = make_repository(file_count)

        start = time.time()
        metadata = await cache.store_archive("bench", f"repo{file_count}", "main", files)
        store_time = time.time() - start

        start = time.time()
        restored = await cache.get_cached_archive("bench", f"repo{file_count}", "main")
        read_time = time.time() - start
        assert restored is not None and len(restored) == file_count

        print(
            f"{file_count:<8} | "
            f"{metadata.compression_metadata.algorithm:<20} | "
            f"{metadata.original_size:<10} | "
            f"{metadata.compressed_size:<10} | "
            f"{metadata.compression_ratio:<8.2f} | "
            f"{store_time:<10.4f} | "
            f"{read_time:.4f}"
        )

    stats = await cache.get_cache_stats()
    print("-" * 95)
    print(f"\nArchives: {stats.total_archives}, space saved: {stats.total_space_saved / 1024:.1f} KB")
    print(f"Mean ratio: {stats.average_compression_ratio:.2f}:1")

    text = "\n".join(f.content for f in make_repository(200))
    summary = compressor.summarize_results([
        compressor.compress_standard(text),
        compressor.compress_extreme(text),
    ])
    print(f"Standard vs extreme on {len(text)} chars: mean ratio {summary.average_ratio:.2f}:1")

    await cache.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    asyncio.run(run_benchmark())
