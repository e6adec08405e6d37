"""
Adaptive Compressor
===================

Encodes one extracted slice as small as the email payload budget allows.

Format choice:
    - Regions with transparency are encoded losslessly as PNG at maximum
      compression effort. When the region uses at most 256 distinct RGBA
      colours it is written as an exact palette PNG (much smaller for
      flat artwork); otherwise as a full RGBA PNG.
    - Opaque regions are encoded as JPEG. Quality starts at
      default_quality and drops by quality_step while the output is over
      the target size, stopping at min_quality. Output that is still over
      budget at the floor is accepted.

The quality search runs at most ceil((default - floor) / step) + 1
encodes and never goes below the floor.

Sizes:
    original_kb is the raw size of the extracted pixels (width x height x
    channels bytes); compressed_kb is the final output. Both are KB rounded
    to 2 decimals.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np
from PIL import Image

from frameslice.errors import CompressionFailedError


logger = logging.getLogger(__name__)


MIME_PNG = "image/png"
MIME_JPEG = "image/jpeg"

PALETTE_MAX_COLORS = 256


def bytes_to_kb(size: int) -> float:
    """Convert a byte count to KB, rounded to 2 decimals."""
    return round(size / 1024, 2)


@dataclass(frozen=True, slots=True)
class CompressedSlice:
    """
    Encoded slice ready for upload.

    Attributes:
        data: Encoded image bytes
        mime_type: image/png or image/jpeg
        quality: Final JPEG quality, None for lossless output
        original_kb: Size of the uncompressed crop (KB)
        compressed_kb: Size of data (KB)
    """

    data: bytes
    mime_type: str
    quality: Optional[int]
    original_kb: float
    compressed_kb: float

    def __repr__(self) -> str:
        return (
            f"CompressedSlice(mime_type={self.mime_type!r}, quality={self.quality}, "
            f"original_kb={self.original_kb}, compressed_kb={self.compressed_kb})"
        )


def _imencode(ext: str, image: np.ndarray, params: list) -> bytes:
    ok, buf = cv2.imencode(ext, image, params)
    if not ok:
        raise CompressionFailedError(f"cv2.imencode failed for {ext} ({image.shape})")
    return buf.tobytes()


def encode_palette_png(region: np.ndarray) -> Optional[bytes]:
    """
    Encode a BGRA region as an exact palette PNG.

    Returns None when the region has more than 256 distinct colours.
    """
    height, width = region.shape[:2]
    rgba = np.ascontiguousarray(cv2.cvtColor(region, cv2.COLOR_BGRA2RGBA))
    packed = rgba.view(np.uint32).reshape(-1)

    colors, inverse = np.unique(packed, return_inverse=True)
    if len(colors) > PALETTE_MAX_COLORS:
        return None

    palette = colors.view(np.uint8).reshape(-1, 4)
    indices = inverse.reshape(height, width).astype(np.uint8)

    image = Image.fromarray(indices)
    image.putpalette(palette[:, :3].tobytes())

    out = io.BytesIO()
    image.save(out, format="PNG", optimize=True, transparency=palette[:, 3].tobytes())
    return out.getvalue()


class AdaptiveCompressor:
    """
    Slice encoder with a byte-size target.

    Attributes:
        default_quality: First JPEG quality tried
        min_quality: Quality floor
        target_kb: Size budget per slice in KB
        quality_step: Quality decrement per retry

    Example:
        compressor = AdaptiveCompressor(default_quality=80, min_quality=60, target_kb=250)
        result = compressor.compress(region, has_alpha=False)
        print(result.mime_type, result.quality, result.compressed_kb)
    """

    def __init__(
        self,
        default_quality: int = 80,
        min_quality: int = 60,
        target_kb: float = 250,
        quality_step: int = 5,
    ) -> None:
        """
        Initialize compressor.

        Args:
            default_quality: Starting JPEG quality in [1, 100]
            min_quality: Lowest JPEG quality in [1, default_quality]
            target_kb: Target size per slice in KB (> 0)
            quality_step: Quality decrement per retry (>= 1)
        """
        if not 1 <= default_quality <= 100:
            raise ValueError("default_quality must be in [1, 100]")
        if not 1 <= min_quality <= default_quality:
            raise ValueError("min_quality must be in [1, default_quality]")
        if target_kb <= 0:
            raise ValueError("target_kb must be positive")
        if quality_step < 1:
            raise ValueError("quality_step must be >= 1")

        self.default_quality = default_quality
        self.min_quality = min_quality
        self.target_kb = target_kb
        self.quality_step = quality_step

    @property
    def target_bytes(self) -> int:
        return int(self.target_kb * 1024)

    @property
    def max_attempts(self) -> int:
        """Upper bound on JPEG encodes per slice."""
        return -(-(self.default_quality - self.min_quality) // self.quality_step) + 1

    def compress(self, region: np.ndarray, has_alpha: bool) -> CompressedSlice:
        """
        Encode one extracted region.

        Args:
            region: BGR or BGRA pixels, dtype=uint8
            has_alpha: Whether the region contains transparent pixels

        Returns:
            CompressedSlice with bytes and size metrics

        Raises:
            CompressionFailedError: If the codec fails
        """
        try:
            if has_alpha:
                return self._compress_lossless(region, region.nbytes)
            return self._compress_lossy(region, region.nbytes)

        except CompressionFailedError:
            raise
        except (cv2.error, OSError, ValueError) as e:
            raise CompressionFailedError(f"Slice compression failed: {e}")

    def _compress_lossless(self, region: np.ndarray, original_bytes: int) -> CompressedSlice:
        data = None
        if region.ndim == 3 and region.shape[2] == 4:
            data = encode_palette_png(region)
        if data is None:
            data = _imencode(".png", region, [cv2.IMWRITE_PNG_COMPRESSION, 9])

        return CompressedSlice(
            data=data,
            mime_type=MIME_PNG,
            quality=None,
            original_kb=bytes_to_kb(original_bytes),
            compressed_kb=bytes_to_kb(len(data)),
        )

    def _compress_lossy(self, region: np.ndarray, original_bytes: int) -> CompressedSlice:
        if region.ndim == 3 and region.shape[2] == 4:
            region = cv2.cvtColor(region, cv2.COLOR_BGRA2BGR)

        quality = self.default_quality
        best = self._encode_jpeg(region, quality)
        attempts = 1

        while len(best) > self.target_bytes and quality > self.min_quality:
            quality = max(self.min_quality, quality - self.quality_step)
            best = self._encode_jpeg(region, quality)
            attempts += 1

        if len(best) > self.target_bytes:
            logger.info(
                f"Slice over budget at quality floor: "
                f"{bytes_to_kb(len(best))}KB > {self.target_kb}KB (q={quality})"
            )

        logger.debug(f"JPEG encoded in {attempts} attempt(s): q={quality}, {len(best)} bytes")

        return CompressedSlice(
            data=best,
            mime_type=MIME_JPEG,
            quality=quality,
            original_kb=bytes_to_kb(original_bytes),
            compressed_kb=bytes_to_kb(len(best)),
        )

    @staticmethod
    def _encode_jpeg(image: np.ndarray, quality: int) -> bytes:
        return _imencode(
            ".jpg",
            image,
            [cv2.IMWRITE_JPEG_QUALITY, quality, cv2.IMWRITE_JPEG_OPTIMIZE, 1],
        )
