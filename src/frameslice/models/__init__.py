"""
Data Models
===========

Pydantic models for the FrameSlice service.

Models:
    Geometry:
        - ChildBox: Bounding box of a frame child
        - FrameSpec: Frame size plus children
        - SliceRect: Normalized slice rectangle

    Input:
        - RectInput, ManualSlice: Caller-drawn rectangles
        - SuggestRequest: Auto-suggestion parameters
        - PushRequest: Slice + upload request

    Output:
        - SliceResult: Uploaded slice with metrics
        - PushResponse: Batch metadata and results
        - SuggestResponse, AccountsResponse
"""

from frameslice.models.geometry import ChildBox, FrameSpec, SliceRect
from frameslice.models.input import ManualSlice, PushRequest, RectInput, SuggestRequest
from frameslice.models.output import (
    AccountsResponse,
    PushResponse,
    SliceResult,
    SuggestResponse,
)

__all__ = [
    # Geometry
    "ChildBox",
    "FrameSpec",
    "SliceRect",
    # Input
    "RectInput",
    "ManualSlice",
    "SuggestRequest",
    "PushRequest",
    # Output
    "SliceResult",
    "PushResponse",
    "SuggestResponse",
    "AccountsResponse",
]
