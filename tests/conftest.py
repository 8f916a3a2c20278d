# tests/conftest.py
# Shared fixtures for the archive cache tests

import pytest
import pytest_asyncio

from repo_archive.configuration import CacheSettings
from repo_archive.core.cache_manager import ArchiveCacheManager
from repo_archive.core.models import FileInfo
from repo_archive.monitoring.metrics import PrometheusMetrics
from repo_archive.stores.memory import InMemoryArchiveStore


class FakeClock:
    """Manually advanced clock (seconds since epoch)."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float = 0.0, hours: float = 0.0):
        self.now += seconds + hours * 3600


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return InMemoryArchiveStore()


@pytest.fixture
def metrics():
    return PrometheusMetrics()


@pytest_asyncio.fixture
async def cache(memory_store, clock, metrics):
    manager = ArchiveCacheManager(
        store=memory_store,
        settings=CacheSettings(),
        metrics=metrics,
        clock=clock,
    )
    await manager.initialize()
    yield manager
    await manager.close()


@pytest.fixture
def sample_files():
    return [
        FileInfo(
            path="src/index.ts",
            name="index.ts",
            type="file",
            size=1000,
            content='console.log("Hello World");',
            language="typescript",
        ),
        FileInfo(
            path="package.json",
            name="package.json",
            type="file",
            size=500,
            content='{"name":"test-repo","version":"1.0.0"}',
            language="json",
        ),
    ]


@pytest.fixture
def large_files():
    """File list whose JSON form is well above the 100 KiB extreme threshold."""
    count = 80
    files = []
    for i in range(count):
        body = "\n".join(
            f"export function handler{i}_{j}(request) {{\n"
            f"    const result = await fetchData(request.params.id_{j});\n"
            f"    console.log(\"handled\", result.length);\n"
            f"    return result;\n"
            f"}}"
            for j in range(12)
        )
        files.append(
            FileInfo(
                path=f"src/handlers/handler_{i}.ts",
                name=f"handler_{i}.ts",
                size=len(body),
                content=body,
                language="typescript",
            )
        )
    return files
