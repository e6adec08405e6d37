"""
Slice Planner
=============

Decides which logical rectangles a push request will produce.

    manualSlices non-empty -> manual normalization (caller order)
    manualSlices empty     -> auto suggestion (top-to-bottom)

Unlike suggestion on its own, a push request with an empty body region
is an error.
"""

import logging
from dataclasses import dataclass
from typing import List

from frameslice.geometry.body import BodyRegion, require_body_region
from frameslice.geometry.normalizer import normalize_manual_slices
from frameslice.geometry.suggester import suggest_slices
from frameslice.models.geometry import FrameSpec, SliceRect
from frameslice.models.input import PushRequest


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SlicePlan:
    """
    Rectangles to process for one push.

    Attributes:
        body: Body region of the frame
        rects: Logical rectangles in processing order
        manual_mode: Whether rects came from the caller
    """

    body: BodyRegion
    rects: List[SliceRect]
    manual_mode: bool


def plan_slices(request: PushRequest) -> SlicePlan:
    """
    Build the slice plan for a push request.

    Raises:
        InvalidBodyRegionError: If header/footer leave no body
        NoValidManualSlicesError: If every manual rectangle is degenerate
    """
    body = require_body_region(
        request.logical_height,
        request.header_height,
        request.footer_height,
    )

    if request.manual_mode:
        rects = normalize_manual_slices(request.logical_width, body, request.manual_slices)
    else:
        frame = FrameSpec(
            width=request.logical_width,
            height=request.logical_height,
            children=request.children,
        )
        rects = suggest_slices(
            frame,
            header_height=request.header_height,
            footer_height=request.footer_height,
            max_slice_height=request.max_slice_height,
        )

    logger.info(
        f"Planned {len(rects)} slice(s): manual={request.manual_mode}, "
        f"body=[{body.top}, {body.bottom})"
    )
    return SlicePlan(body=body, rects=rects, manual_mode=request.manual_mode)
