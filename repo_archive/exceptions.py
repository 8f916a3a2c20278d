# exceptions.py - Error taxonomy
# ============================================================================
# FILE: repo_archive/exceptions.py
# Closed set of failures raised by the compression and cache layers
# ============================================================================

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    DECOMPRESSION_STAGE_FAILURE = "decompression_stage_failure"
    CORRUPT_PAYLOAD = "corrupt_payload"
    STORAGE_INTEGRITY_FAILURE = "storage_integrity_failure"


class ArchiveCacheError(Exception):
    """
    Base class for every error raised by repo_archive.
    Callers can match on `kind` instead of parsing messages.
    """
    kind: ErrorKind


class DecompressionStageFailure(ArchiveCacheError):
    """One stage of the multi-stage pipeline produced no usable output."""
    kind = ErrorKind.DECOMPRESSION_STAGE_FAILURE

    def __init__(self, stage: str, cause: Optional[BaseException] = None):
        self.stage = stage
        self.cause = cause
        message = f"Decompression stage '{stage}' failed"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class CorruptPayload(ArchiveCacheError):
    """Decoded bytes do not form the expected structure."""
    kind = ErrorKind.CORRUPT_PAYLOAD

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Corrupt payload: {reason}")


class StorageIntegrityFailure(ArchiveCacheError):
    """Read-back after a write did not match what was written."""
    kind = ErrorKind.STORAGE_INTEGRITY_FAILURE

    def __init__(self, archive_id: str, expected: int, actual: Optional[int]):
        self.archive_id = archive_id
        self.expected = expected
        self.actual = actual
        got = "no data" if actual is None else f"{actual} bytes"
        super().__init__(
            f"Integrity check failed for {archive_id}: expected {expected} bytes, got {got}"
        )


__all__ = [
    "ErrorKind",
    "ArchiveCacheError",
    "DecompressionStageFailure",
    "CorruptPayload",
    "StorageIntegrityFailure",
]
