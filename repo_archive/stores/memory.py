# memory.py - In-process archive store
# ============================================================================
# FILE: repo_archive/stores/memory.py
# ============================================================================

from typing import Dict, List, Optional

from .base import BaseArchiveStore


class InMemoryArchiveStore(BaseArchiveStore):
    """Dict-backed store. Contents are lost on close()."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str):
        self._data[key] = value

    async def delete(self, key: str):
        self._data.pop(key, None)

    async def keys(self) -> List[str]:
        return list(self._data.keys())

    async def clear(self):
        self._data.clear()

    async def close(self):
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)
