# compression.py - Compression strategy selection
# ============================================================================
# FILE: repo_archive/core/compression.py
# Extreme multi-stage pipeline for large payloads, zlib deflate otherwise
# ============================================================================

import time
import zlib
import logging
from typing import Callable, List, Optional, Union

from ..exceptions import CorruptPayload
from .dictionary import DictionaryCodec
from .models import (
    CompressionAlgorithm,
    CompressionLevel,
    CompressionMetadata,
    CompressionResult,
    CompressionSummary,
)
from .multistage import MultiStageCompressor
from .preprocess import TextPreprocessor

logger = logging.getLogger(__name__)

EXTREME_THRESHOLD_BYTES = 100 * 1024


def checksum_of(data: bytes) -> str:
    return f"{zlib.crc32(data) & 0xFFFFFFFF:08x}"


def compression_ratio(original_size: int, compressed_size: int) -> float:
    if compressed_size <= 0:
        return 0.0
    return original_size / compressed_size


class CompressionManager:
    """
    Picks a compression pipeline by payload size and decodes by metadata tag.

    Payloads above `extreme_threshold_bytes` go through
    preprocess -> dictionary substitution -> LZ4 -> deflate(9) and are tagged
    "extreme-multi-stage". Anything smaller, or any extreme run that raises,
    gets plain deflate and the "deflate" tag.

    Preprocessing is lossy. Unless `lossy_preprocess` is set its output is
    only used when it leaves the text unchanged, so decompress_auto() always
    returns the exact input.
    """

    def __init__(
        self,
        extreme_threshold_bytes: int = EXTREME_THRESHOLD_BYTES,
        standard_level: int = 6,
        lossy_preprocess: bool = False,
        preprocessor: Optional[TextPreprocessor] = None,
        dictionary_codec: Optional[DictionaryCodec] = None,
        multistage: Optional[MultiStageCompressor] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.extreme_threshold_bytes = extreme_threshold_bytes
        self.standard_level = standard_level
        self.lossy_preprocess = lossy_preprocess
        self.preprocessor = preprocessor or TextPreprocessor()
        self.dictionary_codec = dictionary_codec or DictionaryCodec()
        self.multistage = multistage or MultiStageCompressor()
        self.clock = clock

    # ------------------------------------------------------------------------
    # Strategy selection
    # ------------------------------------------------------------------------

    def compress_auto(self, data: Union[str, bytes]) -> CompressionResult:
        """Compress with the pipeline suited to the payload size"""
        if isinstance(data, (bytes, bytearray)):
            size = len(data)
            # Invalid UTF-8 sequences become U+FFFD.
            text = bytes(data).decode("utf-8", errors="replace")
        else:
            text = data
            size = len(text.encode("utf-8"))

        logger.debug(f"Payload size for compression decision: {size / 1024:.2f} KB")

        if size > self.extreme_threshold_bytes:
            return self.compress_extreme(text)
        return self.compress_standard(text)

    def decompress_auto(self, data: bytes, metadata: CompressionMetadata) -> str:
        """Decompress using the algorithm recorded in `metadata`"""
        if metadata.checksum is not None and checksum_of(data) != metadata.checksum:
            raise CorruptPayload(
                f"checksum mismatch (expected {metadata.checksum}, got {checksum_of(data)})"
            )

        if metadata.algorithm == CompressionAlgorithm.EXTREME.value:
            try:
                return self.decompress_extreme(data)
            except Exception as e:
                # Only reachable for a blob carrying the wrong tag.
                logger.warning(f"Extreme decompression failed ({e}), trying standard deflate")
                return self.decompress_standard(data)

        return self.decompress_standard(data)

    # ------------------------------------------------------------------------
    # Extreme pipeline
    # ------------------------------------------------------------------------

    def compress_extreme(self, text: str) -> CompressionResult:
        started = time.perf_counter()
        original_size = len(text.encode("utf-8"))

        try:
            prepared = self.preprocessor.preprocess(text)
            if prepared != text and not self.lossy_preprocess:
                logger.debug("Preprocessing would alter the payload; keeping it verbatim")
                prepared = text

            substituted, dictionary = self.dictionary_codec.compress(prepared)
            blob = self.multistage.compress(substituted, dictionary)
        except Exception as e:
            logger.warning(f"Extreme compression failed ({e}). Falling back to deflate.")
            return self.compress_standard(text)

        result = self._build_result(
            blob, original_size, CompressionAlgorithm.EXTREME, CompressionLevel.MAXIMUM
        )
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"🗜️  Extreme compression: {original_size}b -> {result.compressed_size}b "
            f"(Ratio: {result.compression_ratio:.2f}:1) in {elapsed_ms:.1f}ms"
        )
        return result

    def decompress_extreme(self, data: bytes) -> str:
        text, dictionary = self.multistage.decompress(data)
        restored = self.dictionary_codec.decompress(text, dictionary)
        return self.preprocessor.postprocess(restored)

    # ------------------------------------------------------------------------
    # Standard (single stage)
    # ------------------------------------------------------------------------

    def compress_standard(self, text: str) -> CompressionResult:
        raw = text.encode("utf-8")
        blob = zlib.compress(raw, self.standard_level)
        result = self._build_result(
            blob, len(raw), CompressionAlgorithm.DEFLATE, CompressionLevel.BALANCED
        )
        logger.debug(
            f"Deflate compression: {len(raw)}b -> {len(blob)}b (Ratio: {result.compression_ratio:.2f})"
        )
        return result

    def decompress_standard(self, data: bytes) -> str:
        try:
            raw = zlib.decompress(data)
        except zlib.error as e:
            raise CorruptPayload(f"deflate stream is invalid ({e})") from e
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CorruptPayload(f"inflated data is not valid UTF-8 ({e})") from e

    # ------------------------------------------------------------------------

    def _build_result(
        self,
        blob: bytes,
        original_size: int,
        algorithm: CompressionAlgorithm,
        level: CompressionLevel,
    ) -> CompressionResult:
        return CompressionResult(
            compressed_data=blob,
            original_size=original_size,
            compressed_size=len(blob),
            compression_ratio=compression_ratio(original_size, len(blob)),
            algorithm=algorithm.value,
            metadata=CompressionMetadata(
                algorithm=algorithm.value,
                level=level,
                timestamp=int(self.clock() * 1000),
                checksum=checksum_of(blob),
            ),
        )

    @staticmethod
    def summarize_results(results: List[CompressionResult]) -> CompressionSummary:
        """Aggregate sizes and ratios over several compression runs"""
        total_original = sum(r.original_size for r in results)
        total_compressed = sum(r.compressed_size for r in results)
        average = sum(r.compression_ratio for r in results) / len(results) if results else 0.0
        return CompressionSummary(
            total_original_size=total_original,
            total_compressed_size=total_compressed,
            average_ratio=average,
            total_space_saved=total_original - total_compressed,
        )
