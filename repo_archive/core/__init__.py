# repo_archive/core/__init__.py

from .cache_manager import ArchiveCacheManager
from .compression import CompressionManager
from .dictionary import DictionaryCodec
from .models import (
    CacheStats,
    CompressionAlgorithm,
    CompressionLevel,
    CompressionMetadata,
    CompressionResult,
    CompressionSummary,
    FileInfo,
    RepositoryArchiveData,
    RepositoryArchiveMetadata,
)
from .multistage import MultiStageCompressor
from .preprocess import TextPreprocessor
from .storage_codec import from_storable, to_storable

__all__ = [
    "ArchiveCacheManager",
    "CompressionManager",
    "DictionaryCodec",
    "MultiStageCompressor",
    "TextPreprocessor",
    "to_storable",
    "from_storable",
    "CacheStats",
    "CompressionAlgorithm",
    "CompressionLevel",
    "CompressionMetadata",
    "CompressionResult",
    "CompressionSummary",
    "FileInfo",
    "RepositoryArchiveData",
    "RepositoryArchiveMetadata",
]
