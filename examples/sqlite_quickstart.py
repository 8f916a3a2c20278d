# examples/sqlite_quickstart.py

import asyncio
import logging

from repo_archive import CacheSettings, FileInfo, open_cache

logging.basicConfig(level=logging.INFO)


async def main():
    settings = CacheSettings(backend="sqlite", sqlite_path="archives.db", max_archives=5)

    files = [
        FileInfo(path="src/index.ts", name="index.ts", content='console.log("Hello World");', language="typescript"),
        FileInfo(path="package.json", name="package.json", content='{"name":"demo","version":"1.0.0"}', language="json"),
    ]

    async with open_cache(settings) as cache:
        cached = await cache.get_cached_archive("octocat", "hello-world", "main")
        if cached is None:
            print("Cache miss, storing snapshot...")
            await cache.store_archive("octocat", "hello-world", "main", files)
            cached = await cache.get_cached_archive("octocat", "hello-world", "main")

        print(f"Loaded {len(cached)} files from cache")
        for archive in await cache.get_archive_list():
            print(f"  {archive.id}: {archive.file_count} files, ratio {archive.compression_ratio:.2f}:1")


if __name__ == "__main__":
    asyncio.run(main())
