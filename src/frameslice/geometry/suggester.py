"""
Auto-Slice Suggester
====================

Proposes horizontal cut lines for a frame so large layouts become
reasonably sized independent images.

Algorithm:
    1. Wide, tall, visible children mark "sections" of the layout.
    2. Section spans are clamped to the body region and merged when the
       whitespace between them is small.
    3. The body is partitioned at section boundaries, so rows between
       sections become slices of their own.
    4. Every part is split into chunks no taller than max_slice_height.

Thresholds scale with the frame:
    min section height  max(40, 3% of frame height)
    min child width     max(120, 55% of frame width)
    join gap            max(12, 1% of frame height)

Guarantees:
    - Output is ordered top-to-bottom and never overlaps
    - Every body row belongs to exactly one rectangle
    - No rectangle is taller than max_slice_height
    - A non-empty body always yields at least one rectangle

Suggestion is advisory: an empty body region returns an empty list
instead of failing.
"""

import logging
from typing import Iterable, List

from frameslice.geometry.body import BodyRegion, compute_body_region
from frameslice.geometry.intervals import (
    Interval,
    clamp,
    fill_gaps,
    merge_intervals,
    round_half_up,
    split_interval,
    to_int,
)
from frameslice.models.geometry import ChildBox, FrameSpec, SliceRect


logger = logging.getLogger(__name__)


DEFAULT_MAX_SLICE_HEIGHT = 1200
MIN_MAX_SLICE_HEIGHT = 200


def effective_max_slice_height(max_slice_height: float) -> int:
    """Round the requested max height and floor it at 200."""
    return max(MIN_MAX_SLICE_HEIGHT, to_int(max_slice_height, DEFAULT_MAX_SLICE_HEIGHT))


def _section_intervals(
    children: Iterable[ChildBox],
    body: BodyRegion,
    min_width: int,
    min_section_height: int,
) -> List[Interval]:
    """Collect clamped spans of children large enough to be sections."""
    intervals = []
    for child in children:
        if not child.visible:
            continue

        rel_y = round_half_up(child.y)
        rel_h = round_half_up(child.height)
        rel_w = round_half_up(child.width)

        if rel_w < min_width or rel_h < min_section_height:
            continue

        start = int(clamp(rel_y, body.top, body.bottom))
        end = int(clamp(rel_y + rel_h, body.top, body.bottom))
        if end - start < min_section_height:
            continue

        intervals.append(Interval(start, end))
    return intervals


def tile_body(frame_width: int, body: BodyRegion, max_slice_height: int) -> List[SliceRect]:
    """Fixed-height tiling of the body region, ignoring children."""
    slices = []
    y = body.top
    while y < body.bottom:
        h = min(max_slice_height, body.bottom - y)
        slices.append(SliceRect(x=0, y=y, width=frame_width, height=h))
        y += h
    return slices


def suggest_slices(
    frame: FrameSpec,
    header_height: float = 0,
    footer_height: float = 0,
    max_slice_height: float = DEFAULT_MAX_SLICE_HEIGHT,
) -> List[SliceRect]:
    """
    Suggest full-width slices covering the frame's body region.

    Args:
        frame: Frame size and its direct children
        header_height: Band excluded from the top
        footer_height: Band excluded from the bottom
        max_slice_height: Tallest allowed slice (floored at 200)

    Returns:
        Ordered rectangles, or an empty list when the body is empty
    """
    body = compute_body_region(frame.height, header_height, footer_height)
    if body.is_empty:
        logger.info(
            f"No body region to suggest slices for "
            f"(top={body.top}, bottom={body.bottom})"
        )
        return []

    max_h = effective_max_slice_height(max_slice_height)
    min_section_height = max(40, round_half_up(frame.height * 0.03))
    min_width = max(120, round_half_up(frame.width * 0.55))
    join_gap = max(12, round_half_up(frame.height * 0.01))

    intervals = _section_intervals(frame.children, body, min_width, min_section_height)
    if not intervals:
        intervals = [Interval(body.top, body.bottom)]

    merged = merge_intervals(intervals, join_gap)
    parts = fill_gaps(merged, body.top, body.bottom)

    slices = []
    for part in parts:
        for chunk in split_interval(part, max_h):
            slices.append(
                SliceRect(x=0, y=chunk.start, width=frame.width, height=chunk.height)
            )

    if not slices:
        slices = tile_body(frame.width, body, max_h)

    logger.debug(
        f"Suggested {len(slices)} slices: sections={len(intervals)}, "
        f"merged={len(merged)}, body=[{body.top}, {body.bottom}), max_h={max_h}"
    )
    return slices
