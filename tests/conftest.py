"""
Test Configuration
==================

Pytest fixtures and helpers for FrameSlice tests.
"""

import base64

import cv2
import numpy as np
import pytest

from frameslice.config import Settings, load_config


def encode_png_b64(image: np.ndarray) -> str:
    """Encode a BGR/BGRA array as base64 PNG."""
    ok, buf = cv2.imencode(".png", image)
    assert ok
    return base64.b64encode(buf.tobytes()).decode("ascii")


def make_photo(height: int, width: int, seed: int = 0) -> np.ndarray:
    """Opaque BGR image: smooth gradient plus noise, compresses like a photo."""
    rng = np.random.default_rng(seed)
    ys = np.linspace(0, 255, height, dtype=np.float32)[:, None]
    xs = np.linspace(0, 255, width, dtype=np.float32)[None, :]
    base = np.stack([ys + 0 * xs, xs + 0 * ys, (ys + xs) / 2], axis=-1)
    noise = rng.normal(0, 20, size=(height, width, 3))
    return np.clip(base + noise, 0, 255).astype(np.uint8)


def make_flat_transparent(height: int, width: int) -> np.ndarray:
    """BGRA image with four flat colours, one of them fully transparent."""
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[: height // 2, : width // 2] = (255, 0, 0, 255)
    image[: height // 2, width // 2:] = (0, 255, 0, 255)
    image[height // 2:, : width // 2] = (0, 0, 255, 128)
    image[height // 2:, width // 2:] = (0, 0, 0, 0)
    return image


@pytest.fixture
def png_b64():
    """Encoder: BGR/BGRA array -> base64 PNG string."""
    return encode_png_b64


@pytest.fixture
def photo_factory():
    """Factory for opaque photo-like BGR images."""
    return make_photo


@pytest.fixture
def transparent_factory():
    """Factory for flat transparent BGRA images."""
    return make_flat_transparent


@pytest.fixture
def photo_region():
    """Opaque 240x320 BGR region."""
    return make_photo(240, 320)


@pytest.fixture
def flat_transparent_region():
    """Transparent BGRA region with a small palette."""
    return make_flat_transparent(120, 160)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings with the mock upload backend and two accounts."""
    return load_config(
        config_path=str(tmp_path / "missing.yaml"),
        environ={
            "FRAMESLICE_UPLOAD_BACKEND": "mock",
            "KLAVIYO_ACCOUNTS": "acme, Globex",
            "KLAVIYO_API_KEY_ACME": "pk_acme",
            "KLAVIYO_API_KEY_GLOBEX": "pk_globex",
        },
    )


@pytest.fixture
def sample_push_payload():
    """Auto-mode push payload for a 200x600 frame exported at 2x."""
    return {
        "batchName": "Spring Sale",
        "frameName": "Email / Spring",
        "accountId": "acme",
        "imageBase64": encode_png_b64(make_photo(1200, 400)),
        "logicalWidth": 200,
        "logicalHeight": 600,
        "pixelRatio": 2,
        "headerHeight": 50,
        "footerHeight": 50,
        "maxSliceHeight": 200,
    }
