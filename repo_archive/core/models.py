# models.py - Records shared by the compression and cache layers
# ============================================================================
# FILE: repo_archive/core/models.py
# ============================================================================

from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


class CompressionLevel(Enum):
    FASTEST = "fastest"
    BALANCED = "balanced"
    MAXIMUM = "maximum"


class CompressionAlgorithm(str, Enum):
    EXTREME = "extreme-multi-stage"
    DEFLATE = "deflate"


@dataclass
class CompressionMetadata:
    algorithm: str
    level: CompressionLevel
    timestamp: int  # epoch ms
    checksum: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": str(getattr(self.algorithm, "value", self.algorithm)),
            "level": self.level.value,
            "timestamp": self.timestamp,
            "checksum": self.checksum,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompressionMetadata":
        return cls(
            algorithm=str(data["algorithm"]),
            level=CompressionLevel(data.get("level", CompressionLevel.BALANCED.value)),
            timestamp=int(data.get("timestamp", 0)),
            checksum=data.get("checksum"),
        )


@dataclass
class CompressionResult:
    compressed_data: bytes
    original_size: int
    compressed_size: int
    compression_ratio: float
    algorithm: str
    metadata: CompressionMetadata


@dataclass
class CompressionSummary:
    total_original_size: int
    total_compressed_size: int
    average_ratio: float
    total_space_saved: int


@dataclass
class FileInfo:
    """One file of a repository snapshot."""
    path: str
    name: str
    type: str = "file"
    size: int = 0
    content: Optional[str] = None
    language: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "content": self.content,
            "language": self.language,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileInfo":
        path = data["path"]
        return cls(
            path=path,
            name=data.get("name") or path.rsplit("/", 1)[-1],
            type=data.get("type", "file"),
            size=int(data.get("size") or 0),
            content=data.get("content"),
            language=data.get("language"),
        )


@dataclass
class RepositoryArchiveMetadata:
    id: str
    owner: str
    repo: str
    branch: str
    downloaded_at: int  # epoch ms
    original_size: int
    compressed_size: int
    compression_ratio: float
    file_count: int
    compression_metadata: CompressionMetadata
    commit_sha: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "owner": self.owner,
            "repo": self.repo,
            "branch": self.branch,
            "downloaded_at": self.downloaded_at,
            "original_size": self.original_size,
            "compressed_size": self.compressed_size,
            "compression_ratio": self.compression_ratio,
            "file_count": self.file_count,
            "commit_sha": self.commit_sha,
            "compression_metadata": self.compression_metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepositoryArchiveMetadata":
        return cls(
            id=data["id"],
            owner=data["owner"],
            repo=data["repo"],
            branch=data["branch"],
            downloaded_at=int(data["downloaded_at"]),
            original_size=int(data["original_size"]),
            compressed_size=int(data["compressed_size"]),
            compression_ratio=float(data["compression_ratio"]),
            file_count=int(data["file_count"]),
            compression_metadata=CompressionMetadata.from_dict(data["compression_metadata"]),
            commit_sha=data.get("commit_sha"),
        )


@dataclass
class RepositoryArchiveData:
    metadata: RepositoryArchiveMetadata
    compressed_files: bytes
    raw_archive: Optional[bytes] = None


@dataclass
class CacheStats:
    total_archives: int = 0
    total_original_size: int = 0
    total_compressed_size: int = 0
    average_compression_ratio: float = 0.0
    total_space_saved: int = 0
    oldest_archive: Optional[RepositoryArchiveMetadata] = None
    newest_archive: Optional[RepositoryArchiveMetadata] = None

    @classmethod
    def from_archives(cls, archives: List[RepositoryArchiveMetadata]) -> "CacheStats":
        """Build stats from a newest-first archive list."""
        if not archives:
            return cls()
        total_original = sum(a.original_size for a in archives)
        total_compressed = sum(a.compressed_size for a in archives)
        return cls(
            total_archives=len(archives),
            total_original_size=total_original,
            total_compressed_size=total_compressed,
            average_compression_ratio=sum(a.compression_ratio for a in archives) / len(archives),
            total_space_saved=total_original - total_compressed,
            oldest_archive=archives[-1],
            newest_archive=archives[0],
        )


__all__ = [
    "CompressionLevel",
    "CompressionAlgorithm",
    "CompressionMetadata",
    "CompressionResult",
    "CompressionSummary",
    "FileInfo",
    "RepositoryArchiveMetadata",
    "RepositoryArchiveData",
    "CacheStats",
]
