"""
Manual Slice Normalizer
=======================

Clamps caller-drawn rectangles into the frame's body region.

Rules (applied to each record independently):
    - x is clamped into [0, frame_width - 1]
    - y is clamped into [body.top, max(body.top, body.bottom - 1)]
    - width/height are clamped into [1, distance to the frame/body edge]
    - records narrower or shorter than 2px after clamping are dropped
    - url survives only if it is an absolute http(s) URL

Output keeps the caller's order. Overlaps are allowed and are not
resolved here.
"""

import logging
from typing import Any, Iterable, List

from pydantic import HttpUrl, TypeAdapter, ValidationError

from frameslice.errors import NoValidManualSlicesError
from frameslice.geometry.body import BodyRegion
from frameslice.geometry.intervals import clamp, to_int
from frameslice.models.geometry import SliceRect
from frameslice.models.input import ManualSlice


logger = logging.getLogger(__name__)


MIN_MANUAL_SIDE = 2

_HTTP_URL = TypeAdapter(HttpUrl)


def safe_url(value: Any) -> str:
    """Return value unchanged if it is an absolute http(s) URL, else ""."""
    if not isinstance(value, str) or not value:
        return ""
    try:
        _HTTP_URL.validate_python(value)
    except ValidationError:
        return ""
    return value


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def normalize_manual_slices(
    frame_width: int,
    body: BodyRegion,
    manual_slices: Iterable[ManualSlice],
) -> List[SliceRect]:
    """
    Normalize caller-supplied rectangles against the body region.

    Args:
        frame_width: Logical frame width
        body: Non-empty body region
        manual_slices: Records in caller order

    Returns:
        Clamped rectangles, degenerate ones removed, order preserved

    Raises:
        NoValidManualSlicesError: If no rectangle survives
    """
    rects = []
    dropped = 0

    for record in manual_slices:
        if record is None or record.rect is None:
            dropped += 1
            continue

        r = record.rect
        x = int(clamp(to_int(r.x, 0), 0, max(0, frame_width - 1)))
        y = int(clamp(to_int(r.y, 0), body.top, max(body.top, body.bottom - 1)))

        max_w = frame_width - x
        max_h = body.bottom - y

        w = int(clamp(to_int(r.width, 0), 1, max(1, max_w)))
        h = int(clamp(to_int(r.height, 0), 1, max(1, max_h)))

        if w < MIN_MANUAL_SIDE or h < MIN_MANUAL_SIDE:
            dropped += 1
            continue

        rects.append(
            SliceRect(
                x=x,
                y=y,
                width=w,
                height=h,
                url=safe_url(record.url),
                label=_as_text(record.label),
                alt=_as_text(record.alt),
            )
        )

    if dropped:
        logger.info(f"Dropped {dropped} degenerate manual slice(s)")

    if not rects:
        raise NoValidManualSlicesError(
            "Manual slices provided but no valid rectangles were generated."
        )

    return rects
