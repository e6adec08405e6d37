"""
Request Schemas
===============

Pydantic models for requests sent by the design-tool plugin.

Push Contract:
    {
        "batchName": "Spring Sale",
        "frameName": "Email / Spring",
        "accountId": "acme",
        "imageBase64": "<base64 PNG exported at pixelRatio>",
        "logicalWidth": 600,
        "logicalHeight": 2400,
        "pixelRatio": 2,
        "headerHeight": 120,
        "footerHeight": 200,
        "maxSliceHeight": 1200,
        "manualSlices": [
            {"rect": {"x": 0, "y": 120, "width": 600, "height": 400},
             "url": "https://example.com", "label": "hero", "alt": "Hero"}
        ]
    }

An empty manualSlices list selects auto-slicing of the body region.
"""

from typing import Any, List, Optional

from pydantic import Field

from frameslice.models.base import CamelModel
from frameslice.models.geometry import ChildBox, FrameSpec, SliceRect


DEFAULT_BATCH_NAME = "Figma Export"


class RectInput(CamelModel):
    """Loosely validated rectangle drawn by the user (logical coordinates)."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class ManualSlice(CamelModel):
    """
    Caller-supplied slice record.

    Records may be out of bounds or overlapping; the normalizer clamps
    them to the frame's body region. Records without a rect are skipped.
    """

    rect: Optional[RectInput] = None
    url: Any = ""
    label: Any = ""
    alt: Any = ""

    @classmethod
    def from_rect(cls, rect: SliceRect) -> "ManualSlice":
        """Wrap a normalized rectangle so it can be sent back as manual input."""
        return cls(
            rect=RectInput(x=rect.x, y=rect.y, width=rect.width, height=rect.height),
            url=rect.url,
            label=rect.label,
            alt=rect.alt,
        )


class SuggestRequest(CamelModel):
    """Request for auto-suggested slices of a frame."""

    frame: FrameSpec
    header_height: float = Field(default=0, description="Header band height")
    footer_height: float = Field(default=0, description="Footer band height")
    max_slice_height: float = Field(default=1200, description="Maximum slice height")


class PushRequest(CamelModel):
    """
    Request to slice, compress and upload an exported frame.

    Attributes:
        image_base64: Frame export at pixel_ratio, base64-encoded
        logical_width: Frame width at 1x
        logical_height: Frame height at 1x
        pixel_ratio: Export scale relative to logical coordinates
        header_height: Band excluded from the top of the frame
        footer_height: Band excluded from the bottom of the frame
        max_slice_height: Tallest auto slice (floored at 200)
        manual_slices: Explicit rectangles; empty selects auto-slicing
        children: Child boxes for child-aware auto-slicing
        batch_name: Upload name prefix
        frame_name: Source frame name, echoed back
        account_id: Account whose credential is used for upload
    """

    image_base64: str = Field(..., min_length=1)
    logical_width: int = Field(..., gt=0)
    logical_height: int = Field(..., gt=0)
    pixel_ratio: float = Field(default=1.0, gt=0)
    header_height: float = 0
    footer_height: float = 0
    max_slice_height: float = 1200
    manual_slices: List[ManualSlice] = Field(default_factory=list)
    children: List[ChildBox] = Field(default_factory=list)
    batch_name: Optional[str] = None
    frame_name: Optional[str] = None
    account_id: Optional[str] = None

    @property
    def resolved_batch_name(self) -> str:
        return self.batch_name or self.frame_name or DEFAULT_BATCH_NAME

    @property
    def manual_mode(self) -> bool:
        return len(self.manual_slices) > 0
