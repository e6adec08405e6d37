"""
Imaging Module
==============

Pixel-level stages of the slice pipeline:
    - decoder: source decoding, region extraction, transparency detection
    - compressor: format choice and quality search per slice
"""

from frameslice.imaging.compressor import AdaptiveCompressor, CompressedSlice
from frameslice.imaging.decoder import (
    decode_source_image,
    extract_region,
    has_transparency,
)

__all__ = [
    "AdaptiveCompressor",
    "CompressedSlice",
    "decode_source_image",
    "extract_region",
    "has_transparency",
]
