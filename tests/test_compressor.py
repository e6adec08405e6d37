"""
Adaptive Compressor Tests
=========================
"""

import io

import cv2
import numpy as np
import pytest
from PIL import Image

from frameslice.imaging.compressor import (
    MIME_JPEG,
    MIME_PNG,
    AdaptiveCompressor,
    bytes_to_kb,
    encode_palette_png,
)


def _decode_rgba(data: bytes) -> np.ndarray:
    return np.asarray(Image.open(io.BytesIO(data)).convert("RGBA"))


@pytest.fixture
def encode_counter(monkeypatch):
    """Counts JPEG encodes made by AdaptiveCompressor."""
    calls = []
    original = AdaptiveCompressor._encode_jpeg

    def counting(image, quality):
        calls.append(quality)
        return original(image, quality)

    monkeypatch.setattr(AdaptiveCompressor, "_encode_jpeg", staticmethod(counting))
    return calls


class TestLosslessPath:
    """Regions with transparency."""

    def test_large_transparent_region_is_png(self, transparent_factory):
        region = transparent_factory(2000, 2000)
        result = AdaptiveCompressor().compress(region, has_alpha=True)

        assert result.mime_type == MIME_PNG
        assert result.quality is None
        assert result.data.startswith(b"\x89PNG")
        assert result.compressed_kb == bytes_to_kb(len(result.data))

    def test_palette_png_is_exact(self, flat_transparent_region):
        result = AdaptiveCompressor().compress(flat_transparent_region, has_alpha=True)

        expected = cv2.cvtColor(flat_transparent_region, cv2.COLOR_BGRA2RGBA)
        np.testing.assert_array_equal(_decode_rgba(result.data), expected)

    def test_many_colours_fall_back_to_rgba_png(self):
        ys, xs = np.mgrid[0:300, 0:300]
        region = np.zeros((300, 300, 4), dtype=np.uint8)
        region[..., 0] = xs % 256
        region[..., 1] = ys % 256
        region[..., 2] = 40
        region[..., 3] = 128

        assert encode_palette_png(region) is None

        result = AdaptiveCompressor().compress(region, has_alpha=True)
        assert result.mime_type == MIME_PNG

        decoded = cv2.imdecode(np.frombuffer(result.data, np.uint8), cv2.IMREAD_UNCHANGED)
        np.testing.assert_array_equal(decoded, region)


class TestLossyPath:
    """Opaque regions."""

    def test_within_budget_uses_default_quality(self, photo_region, encode_counter):
        compressor = AdaptiveCompressor(default_quality=80, min_quality=60, target_kb=10_000)
        result = compressor.compress(photo_region, has_alpha=False)

        assert result.mime_type == MIME_JPEG
        assert result.quality == 80
        assert encode_counter == [80]
        assert result.data.startswith(b"\xff\xd8")

    def test_over_budget_stops_at_floor(self, photo_region, encode_counter):
        compressor = AdaptiveCompressor(default_quality=80, min_quality=60, target_kb=0.5)
        result = compressor.compress(photo_region, has_alpha=False)

        assert result.quality == 60
        assert result.compressed_kb > 0.5
        assert encode_counter == [80, 75, 70, 65, 60]
        assert len(encode_counter) <= compressor.max_attempts

    def test_uneven_step_clamps_to_floor(self, photo_region, encode_counter):
        compressor = AdaptiveCompressor(default_quality=80, min_quality=61, target_kb=0.5, quality_step=7)
        result = compressor.compress(photo_region, has_alpha=False)

        assert encode_counter == [80, 73, 66, 61]
        assert result.quality == 61
        assert compressor.max_attempts == 4

    def test_quality_search_stops_once_under_budget(self, photo_region, encode_counter):
        sizes = {}
        for q in (80, 75, 70, 65, 60):
            ok, buf = cv2.imencode(
                ".jpg", photo_region, [cv2.IMWRITE_JPEG_QUALITY, q, cv2.IMWRITE_JPEG_OPTIMIZE, 1]
            )
            sizes[q] = len(buf)
        encode_counter.clear()

        # Budget that q=80 misses but q=75 meets
        target_kb = (sizes[80] - 1) / 1024
        compressor = AdaptiveCompressor(target_kb=target_kb)
        result = compressor.compress(photo_region, has_alpha=False)

        assert sizes[75] <= compressor.target_bytes
        assert result.quality == 75
        assert encode_counter == [80, 75]

    def test_not_larger_than_original(self, photo_region):
        result = AdaptiveCompressor().compress(photo_region, has_alpha=False)
        assert result.compressed_kb <= result.original_kb

    @pytest.mark.parametrize("value", [0, 128, 255])
    def test_flat_region_not_larger_than_original(self, value):
        """Flat artwork, where PNG beats JPEG, still reports a size reduction."""
        region = np.full((1200, 1000, 3), value, dtype=np.uint8)
        result = AdaptiveCompressor().compress(region, has_alpha=False)

        assert result.mime_type == MIME_JPEG
        assert result.compressed_kb <= result.original_kb

    def test_original_is_raw_pixel_size(self, photo_region):
        result = AdaptiveCompressor().compress(photo_region, has_alpha=False)
        assert result.original_kb == bytes_to_kb(240 * 320 * 3)

    def test_opaque_bgra_encoded_as_jpeg(self, photo_region):
        region = cv2.cvtColor(photo_region, cv2.COLOR_BGR2BGRA)
        result = AdaptiveCompressor().compress(region, has_alpha=False)

        assert result.mime_type == MIME_JPEG
        decoded = cv2.imdecode(np.frombuffer(result.data, np.uint8), cv2.IMREAD_UNCHANGED)
        assert decoded.shape == photo_region.shape


class TestConfiguration:
    """Constructor validation."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"default_quality": 0},
            {"default_quality": 101},
            {"default_quality": 60, "min_quality": 70},
            {"min_quality": 0},
            {"target_kb": 0},
            {"quality_step": 0},
        ],
    )
    def test_rejects_invalid(self, kwargs):
        with pytest.raises(ValueError):
            AdaptiveCompressor(**kwargs)

    def test_max_attempts(self):
        assert AdaptiveCompressor(80, 60, 250, 5).max_attempts == 5
        assert AdaptiveCompressor(80, 80, 250, 5).max_attempts == 1
        assert AdaptiveCompressor(80, 61, 250, 7).max_attempts == 4

    def test_bytes_to_kb(self):
        assert bytes_to_kb(1024) == 1.0
        assert bytes_to_kb(1536) == 1.5
        assert bytes_to_kb(1000) == 0.98
