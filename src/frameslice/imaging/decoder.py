"""
Source Image Decoder
====================

Decoding of the exported frame bitmap and extraction of slice regions.

Design Rules:
    - This is the ONLY place in the codebase that decodes source images
    - Decodes with IMREAD_UNCHANGED so the alpha channel survives
    - Normalizes to 8-bit BGR or BGRA
    - Fails fast on corrupt exports
"""

import base64
import binascii
import logging
from typing import Union

import cv2
import numpy as np

from frameslice.errors import ExtractionFailedError, UnreadableSourceImageError
from frameslice.geometry.rescale import PixelRect


logger = logging.getLogger(__name__)


def decode_base64_image(image_b64: str) -> bytes:
    """
    Decode a base64 export payload.

    Accepts a bare base64 string or a data URL.

    Raises:
        UnreadableSourceImageError: If the payload is not valid base64
    """
    if image_b64.startswith("data:") and "," in image_b64:
        image_b64 = image_b64.split(",", 1)[1]
    try:
        return base64.b64decode(image_b64, validate=False)
    except (binascii.Error, ValueError) as e:
        raise UnreadableSourceImageError(f"Base64 decode of exported image failed: {e}")


def decode_source_image(data: Union[bytes, str]) -> np.ndarray:
    """
    Decode the exported frame into an 8-bit BGR/BGRA array.

    Args:
        data: Raw image bytes, or a base64 string

    Returns:
        Image as np.ndarray (H, W, 3) or (H, W, 4), dtype=uint8

    Raises:
        UnreadableSourceImageError: If no image with dimensions can be decoded
    """
    if isinstance(data, str):
        data = decode_base64_image(data)

    if not data:
        raise UnreadableSourceImageError("Could not read exported image dimensions: empty payload.")

    nparr = np.frombuffer(data, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED)

    if image is None or image.size == 0:
        raise UnreadableSourceImageError("Could not read exported image dimensions.")

    if image.dtype == np.uint16:
        image = (image // 257).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise UnreadableSourceImageError(f"Unsupported image dtype: {image.dtype}")

    if image.ndim == 2:
        image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    elif image.ndim != 3 or image.shape[2] not in (3, 4):
        raise UnreadableSourceImageError(f"Unsupported image shape: {image.shape}")

    height, width = image.shape[:2]
    if not width or not height:
        raise UnreadableSourceImageError("Could not read exported image dimensions.")

    logger.debug(f"Decoded source image: {width}x{height}, channels={image.shape[2]}")
    return image


def extract_region(image: np.ndarray, rect: PixelRect) -> np.ndarray:
    """
    Copy the exact pixel region out of the source image.

    Args:
        image: Decoded source image
        rect: Region inside the image bounds (see geometry.rescale)

    Returns:
        Contiguous copy of the region

    Raises:
        ExtractionFailedError: If the region falls outside the image
    """
    height, width = image.shape[:2]
    if (
        rect.left < 0
        or rect.top < 0
        or rect.width < 1
        or rect.height < 1
        or rect.right > width
        or rect.bottom > height
    ):
        raise ExtractionFailedError(
            f"Extract region {rect} outside source image {width}x{height}"
        )

    region = image[rect.top:rect.bottom, rect.left:rect.right]
    return region.copy()


def has_transparency(region: np.ndarray) -> bool:
    """True when the region has an alpha channel with any non-opaque pixel."""
    if region.ndim != 3 or region.shape[2] != 4:
        return False
    return bool((region[:, :, 3] < 255).any())
