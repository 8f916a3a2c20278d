# multistage.py - LZ4 + deflate binary pipeline
# ============================================================================
# FILE: repo_archive/core/multistage.py
# Stage A: LZ4 frame (speed)  ->  Stage B: zlib deflate level 9 (size)
# ============================================================================

import json
import zlib
import logging
from typing import Dict, Tuple

import lz4.frame

from ..exceptions import CorruptPayload, DecompressionStageFailure

logger = logging.getLogger(__name__)

INFLATE_STAGE = "inflate"
LZ_STAGE = "lz-decompress"


class MultiStageCompressor:
    """
    Packs a dictionary-substituted text and its dictionary into one binary blob.
    Stateless; safe to share.
    """

    def __init__(self, level: int = 9, wbits: int = 15, mem_level: int = 9):
        self.level = level
        self.wbits = wbits
        self.mem_level = mem_level

    def compress(self, text: str, dictionary: Dict[str, str]) -> bytes:
        payload = json.dumps({"text": text, "dictionary": dictionary}, ensure_ascii=False)
        raw = payload.encode("utf-8")

        # Stage A
        lz_compressed = lz4.frame.compress(raw)
        logger.debug(f"LZ4 stage: {len(raw)}b -> {len(lz_compressed)}b")

        # Stage B
        deflater = zlib.compressobj(
            self.level,
            zlib.DEFLATED,
            self.wbits,
            self.mem_level,
            zlib.Z_DEFAULT_STRATEGY,
        )
        deflated = deflater.compress(lz_compressed) + deflater.flush()
        logger.debug(f"Deflate stage: {len(lz_compressed)}b -> {len(deflated)}b")

        return deflated

    def decompress(self, data: bytes) -> Tuple[str, Dict[str, str]]:
        try:
            inflated = zlib.decompress(data, self.wbits)
        except zlib.error as e:
            raise DecompressionStageFailure(INFLATE_STAGE, e) from e
        if not inflated:
            raise DecompressionStageFailure(INFLATE_STAGE)

        try:
            raw = lz4.frame.decompress(inflated)
        except RuntimeError as e:
            raise DecompressionStageFailure(LZ_STAGE, e) from e
        if not raw:
            raise DecompressionStageFailure(LZ_STAGE)

        try:
            payload = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CorruptPayload(f"payload is not valid UTF-8 ({e})") from e

        if not payload or payload == "undefined" or not payload.strip():
            raise CorruptPayload(f"invalid decoded payload {payload[:20]!r}")

        try:
            parsed = json.loads(payload)
        except ValueError as e:
            raise CorruptPayload(f"payload is not valid JSON ({e})") from e

        if not isinstance(parsed, dict) or not isinstance(parsed.get("text"), str):
            raise CorruptPayload("payload does not contain a text field")

        dictionary = parsed.get("dictionary") or {}
        if not isinstance(dictionary, dict):
            raise CorruptPayload("payload dictionary is not a mapping")

        return parsed["text"], dictionary
