# storage_codec.py - Binary <-> text adapter for key-value backends
# ============================================================================
# FILE: repo_archive/core/storage_codec.py
# Backends that only round-trip text get base64
# ============================================================================

import base64
import binascii
from typing import Union

from ..exceptions import CorruptPayload


def to_storable(data: Union[bytes, bytearray, memoryview]) -> str:
    """Encode a binary blob as standard base64 text"""
    return base64.b64encode(bytes(data)).decode("ascii")


def from_storable(text: str) -> bytes:
    """Decode text produced by to_storable() back to the exact bytes"""
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise CorruptPayload(f"stored blob is not valid base64 ({e})") from e
