"""
Source Image Decoder Tests
==========================
"""

import base64

import cv2
import numpy as np
import pytest

from frameslice.errors import ExtractionFailedError, UnreadableSourceImageError
from frameslice.geometry.rescale import PixelRect
from frameslice.imaging.decoder import (
    decode_base64_image,
    decode_source_image,
    extract_region,
    has_transparency,
)


class TestDecodeSourceImage:
    """Tests for decode_source_image()."""

    def test_decodes_bgra_png(self, png_b64, transparent_factory):
        image = transparent_factory(40, 60)
        decoded = decode_source_image(png_b64(image))

        assert decoded.shape == (40, 60, 4)
        assert decoded.dtype == np.uint8
        np.testing.assert_array_equal(decoded, image)

    def test_decodes_bgr_png_bytes(self, photo_factory):
        ok, buf = cv2.imencode(".png", photo_factory(30, 50))
        assert ok

        decoded = decode_source_image(buf.tobytes())
        assert decoded.shape == (30, 50, 3)

    def test_accepts_data_url(self, png_b64, photo_factory):
        payload = "data:image/png;base64," + png_b64(photo_factory(10, 10))
        assert decode_source_image(payload).shape == (10, 10, 3)

    def test_grayscale_expanded_to_bgr(self, png_b64):
        gray = np.full((12, 8), 77, dtype=np.uint8)
        decoded = decode_source_image(png_b64(gray))

        assert decoded.shape == (12, 8, 3)
        assert (decoded == 77).all()

    def test_sixteen_bit_reduced_to_eight(self, png_b64):
        deep = np.full((4, 4, 3), 65535, dtype=np.uint16)
        decoded = decode_source_image(png_b64(deep))

        assert decoded.dtype == np.uint8
        assert (decoded == 255).all()

    @pytest.mark.parametrize("payload", [b"", b"definitely not an image", "", "%%%%"])
    def test_unreadable_payload(self, payload):
        with pytest.raises(UnreadableSourceImageError):
            decode_source_image(payload)

    def test_bad_padding_is_unreadable(self):
        with pytest.raises(UnreadableSourceImageError):
            decode_base64_image("abcde")

    def test_plain_base64(self):
        assert decode_base64_image(base64.b64encode(b"hello").decode()) == b"hello"


class TestExtractRegion:
    """Tests for extract_region()."""

    def test_exact_copy(self, photo_factory):
        image = photo_factory(100, 80)
        region = extract_region(image, PixelRect(left=10, top=20, width=30, height=40))

        assert region.shape == (40, 30, 3)
        np.testing.assert_array_equal(region, image[20:60, 10:40])
        assert not np.shares_memory(region, image)

    @pytest.mark.parametrize(
        "rect",
        [
            PixelRect(left=-1, top=0, width=10, height=10),
            PixelRect(left=0, top=0, width=81, height=10),
            PixelRect(left=0, top=95, width=10, height=10),
            PixelRect(left=0, top=0, width=0, height=10),
        ],
    )
    def test_out_of_bounds(self, rect, photo_factory):
        with pytest.raises(ExtractionFailedError):
            extract_region(photo_factory(100, 80), rect)


class TestHasTransparency:
    """Tests for has_transparency()."""

    def test_opaque_bgr(self, photo_region):
        assert has_transparency(photo_region) is False

    def test_opaque_alpha_channel(self):
        image = np.full((10, 10, 4), 255, dtype=np.uint8)
        assert has_transparency(image) is False

    def test_single_translucent_pixel(self):
        image = np.full((10, 10, 4), 255, dtype=np.uint8)
        image[9, 9, 3] = 254
        assert has_transparency(image) is True
