"""
Geometry Module
===============

Slice geometry in logical (1x) coordinates.

This module provides:
    - Interval primitives (clamp, merge, split)
    - Body region computation
    - Auto-slice suggestion from frame children
    - Manual rectangle normalization
    - Logical-to-pixel rescaling
"""

from frameslice.geometry.body import BodyRegion, compute_body_region, require_body_region
from frameslice.geometry.intervals import Interval, merge_intervals, split_interval
from frameslice.geometry.normalizer import normalize_manual_slices, safe_url
from frameslice.geometry.rescale import PixelRect, scale_rect
from frameslice.geometry.suggester import suggest_slices

__all__ = [
    "BodyRegion",
    "compute_body_region",
    "require_body_region",
    "Interval",
    "merge_intervals",
    "split_interval",
    "normalize_manual_slices",
    "safe_url",
    "PixelRect",
    "scale_rect",
    "suggest_slices",
]
