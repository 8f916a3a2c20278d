# base.py - Abstract Base for Archive Storage
# ============================================================================
# FILE: repo_archive/stores/base.py
# Async key-value contract consumed by ArchiveCacheManager
# ============================================================================

from abc import ABC, abstractmethod
from typing import List, Optional


class BaseArchiveStore(ABC):
    """
    Abstract base class for archive backends.
    Values are serialized JSON records; backends never interpret them.
    """

    async def initialize(self):
        """Prepare the backend (create tables, open connections)."""

    async def close(self):
        """Release backend resources."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str):
        pass

    @abstractmethod
    async def delete(self, key: str):
        pass

    @abstractmethod
    async def keys(self) -> List[str]:
        pass

    @abstractmethod
    async def clear(self):
        pass
